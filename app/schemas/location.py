from typing import Optional

from pydantic import BaseModel

from app.core.errors import ValidationError


class Location(BaseModel):
    """
    Localização no formato "cidade,região,país".
    Construída uma vez na borda do sistema (request ou banco) e usada em todo o resto.
    """
    city: str
    region: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Location":
        if not raw or not raw.strip():
            raise ValidationError("Location is required")

        parts = [p.strip() for p in raw.split(",")]
        if len(parts) > 3:
            raise ValidationError(f"Invalid location format: {raw!r}")
        if not parts[0]:
            raise ValidationError("Location must start with a city name")

        parts += [""] * (3 - len(parts))
        return cls(city=parts[0], region=parts[1] or None, country=parts[2] or None)

    @property
    def canonical(self) -> str:
        # Sem espaços em volta das vírgulas; segmentos vazios do fim são descartados
        parts = [self.city, self.region or "", self.country or ""]
        while parts and not parts[-1]:
            parts.pop()
        return ",".join(parts)

    @property
    def query(self) -> str:
        # Consulta da Weather API: partes não vazias separadas por ", "
        return ", ".join(p for p in (self.city, self.region, self.country) if p)

    @property
    def city_name(self) -> str:
        return self.city

    def __str__(self) -> str:
        return self.canonical
