# -*- coding: utf-8 -*-
"""
Errores de dominio de los juegos.

Los repositorios los lanzan; main.py los traduce a respuestas JSON con el
mismo formato que el resto de errores HTTP ({"error", "message", "path"}).
"""


class GameError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GameError):
    """Challenge, attempt or player does not exist (or is not the caller's)."""
    status_code = 404


class InvalidStateError(GameError):
    """Mutation attempted on an attempt that already reached a terminal status."""
    status_code = 409


class GuessValidationError(GameError):
    """Guess text is empty or malformed."""
    status_code = 422


class ConcurrentUpdateError(GameError):
    """Another request updated the same attempt first; nothing was committed."""
    status_code = 409
