from .sessions import bp
