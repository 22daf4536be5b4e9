# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception, retry_if_exception_type
import requests
import redis


def is_transient_http_error(exc: BaseException) -> bool:
    # 4xx z bramki/API nie zmieni sie po ponowieniu
    if isinstance(exc, requests.HTTPError):
        return exc.response is None or exc.response.status_code >= 500
    if isinstance(exc, requests.RequestException):
        return True
    # bledy API zmapowane przez klienta (StorefrontApiError) niosa status_code
    status_code = getattr(exc, "status_code", None)
    return isinstance(status_code, int) and status_code >= 500


def http_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(is_transient_http_error),
    )


def redis_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )
