import functools
import logging

import httpx

from printify_studio.errors import PipelineError

logger = logging.getLogger(__name__)


def handle_errors(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PipelineError as e:
            logger.error(f"Error in {e.step}: {e.message}")
            return e.to_payload()
        except httpx.HTTPStatusError as e:
            details = {}
            content_type = e.response.headers.get("content-type", "")
            if content_type.startswith("application/json"):
                try:
                    details = e.response.json()
                except ValueError:
                    pass
            return {
                "error": True,
                "status_code": e.response.status_code,
                "message": str(e),
                "details": details,
            }
        except httpx.RequestError as e:
            return {
                "error": True,
                "status_code": 502,
                "message": f"Request to {e.request.url} failed: {e}",
                "details": {},
            }
        except ValueError as e:
            return {
                "error": True,
                "status_code": 400,
                "message": str(e),
                "details": {},
            }

    return wrapper
