"""spacetraveling: a blog front-end for a Prismic repository."""

__version__ = "0.1.0"
