from .card_import import CardImporter

__all__ = ['CardImporter']
