# storefront/services/session_store.py
import secrets

import redis

from storefront.utils.settings import REDIS_URL, OTP_TTL_SECONDS, SESSION_TTL_SECONDS
from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry

logger = get_logger(__name__)


class SessionStore:
    """
    -kody OTP (SET EX, wygasaja same)
    -tokeny sesji -> user_id
    """

    def __init__(self, url: str | None = None, client=None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _otp_key(phone: str) -> str:
        return f"otp:{phone}"

    @staticmethod
    def _session_key(token: str) -> str:
        return f"session:{token}"

    @redis_retry()
    def save_otp(self, phone: str, otp: str, ttl: int = OTP_TTL_SECONDS) -> None:
        #nowy kod nadpisuje poprzedni
        self.redis.set(name=self._otp_key(phone), value=otp, ex=ttl)

    @redis_retry()
    def pop_otp(self, phone: str) -> str | None:
        #GETDEL atomowo - OTP jest jednorazowe
        return self.redis.getdel(self._otp_key(phone))

    @redis_retry()
    def create_session(self, user_id: int, ttl: int = SESSION_TTL_SECONDS) -> str:
        token = secrets.token_urlsafe(32)
        self.redis.set(name=self._session_key(token), value=str(user_id), ex=ttl)
        logger.info(f"Session created for user {user_id}")
        return token

    @redis_retry()
    def get_user_id(self, token: str) -> int | None:
        value = self.redis.get(self._session_key(token))
        return int(value) if value is not None else None

    @redis_retry()
    def delete_session(self, token: str) -> None:
        self.redis.delete(self._session_key(token))
