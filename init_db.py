# init_db.py
from app.db.session import engine
from app.db.base import Base

# IMPORTANTE: Importar os modelos aqui para que o SQLAlchemy
# saiba que eles existem antes de criar as tabelas
from app.models.subscription import PushSubscription


def init_db():
    print("Conectando ao banco de dados...")
    print("Criando tabelas...")

    Base.metadata.create_all(bind=engine)

    print(f"Tabela '{PushSubscription.__tablename__}' pronta!")

if __name__ == "__main__":
    init_db()
