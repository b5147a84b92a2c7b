"""Model exports."""
from cadastral_exporter.models.cadastral import CadastralObject

__all__ = [
    "CadastralObject",
]
