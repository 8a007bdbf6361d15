"""
Identidad: login/logout contra Firebase Authentication (REST, Identity Toolkit).

Endpoint: POST {IDENTITY_BASE_URL}accounts:signInWithPassword?key=API_KEY
La API key viene de st.secrets["firebase"]["api_key"].
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import httpx

from config import IDENTITY_BASE_URL, IDENTITY_TIMEOUT

logger = logging.getLogger(__name__)

# Códigos de error de Firebase → mensaje para el usuario
ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "Usuario o contraseña incorrectos",
    "INVALID_PASSWORD": "Usuario o contraseña incorrectos",
    "INVALID_LOGIN_CREDENTIALS": "Usuario o contraseña incorrectos",
    "USER_DISABLED": "Usuario deshabilitado",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Demasiados intentos, pruebe más tarde",
}


class AuthError(Exception):
    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


@dataclass
class Identity:
    uid: str
    email: str
    id_token: str
    refresh_token: str = ""


class IdentityClient:
    """
    Cliente síncrono del proveedor de identidad.

    Usage:
        client = IdentityClient(api_key)
        identity = client.sign_in("admin@hostel.com", "secreto")
    """

    def __init__(self, api_key: str, base_url: str = IDENTITY_BASE_URL,
                 transport: httpx.BaseTransport = None):
        self.api_key = api_key
        self.base_url = base_url
        self._client = httpx.Client(timeout=IDENTITY_TIMEOUT, transport=transport)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def sign_in(self, email: str, password: str) -> Identity:
        if not email or not password:
            raise AuthError("Ingrese email y contraseña")
        try:
            response = self._client.post(
                f"{self.base_url}accounts:signInWithPassword",
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
        except httpx.HTTPError as e:
            logger.error("Error de red en login: %s", e)
            raise AuthError("No se pudo contactar el servicio de autenticación") from e

        if response.status_code != 200:
            code = ""
            try:
                code = response.json().get("error", {}).get("message", "")
            except ValueError:
                pass
            # "INVALID_PASSWORD : ..." → "INVALID_PASSWORD"
            code = code.split(" ")[0]
            logger.warning("Login rechazado para %s: %s", email, code or response.status_code)
            raise AuthError(ERROR_MESSAGES.get(code, "Error de autenticación"), response.status_code)

        data = response.json()
        logger.info("Login correcto: %s", data.get("email", email))
        return Identity(
            uid=data.get("localId", ""),
            email=data.get("email", email),
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
        )


class AuthGate:
    """
    Sesión actual + aviso de cambios (login/logout) a los suscriptores.
    """

    def __init__(self, client: IdentityClient):
        self.client = client
        self.identity: Optional[Identity] = None
        self._listeners: List[Callable[[Optional[Identity]], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def subscribe(self, callback: Callable[[Optional[Identity]], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._listeners):
            callback(self.identity)

    def sign_in(self, email: str, password: str) -> Identity:
        self.identity = self.client.sign_in(email, password)
        self._notify()
        return self.identity

    def sign_out(self) -> None:
        if self.identity is None:
            return
        logger.info("Logout: %s", self.identity.email)
        self.identity = None
        self._notify()
