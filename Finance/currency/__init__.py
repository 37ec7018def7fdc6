"""
Currency conversion to USD with a gross coefficient.
No models; live rates are cached through Django's cache framework.
"""
