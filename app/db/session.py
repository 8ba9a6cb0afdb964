from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.config import settings

# SQLite precisa liberar o uso entre threads (o scheduler roda em background)
connect_args = {}
if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    pool_pre_ping=True, # Verifica se a conexão está viva antes de usar
    connect_args=connect_args,
    echo=False # Mude para True se quiser ver os comandos SQL no terminal
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
