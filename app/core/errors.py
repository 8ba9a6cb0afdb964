from typing import Optional


class WeatherlyError(Exception):
    """Base de todos os erros da aplicação. Cada subclasse sabe seu status HTTP."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(WeatherlyError):
    """Requisição malformada (o usuário consegue corrigir)."""
    status_code = 400


class NotFoundError(WeatherlyError):
    status_code = 404


class ProviderError(WeatherlyError):
    """Falha ao buscar ou interpretar os dados da Weather API."""
    status_code = 500


class DataGapError(ProviderError):
    """A previsão horária não tem a fatia que precisamos."""


class DeliveryError(WeatherlyError):
    """Falha do serviço de push. Transitória: tenta de novo no próximo ciclo."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.push_status = status_code


class EndpointGoneError(DeliveryError):
    """O serviço de push respondeu 404/410: o endpoint morreu de vez."""


class StoreError(WeatherlyError):
    status_code = 500
