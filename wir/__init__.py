__version__ = "0.3"
__url__ = "https://mdwiki.org/"
