import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests

from cut_sprint import config
from cut_sprint.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*|\s*```")
_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


class LLMClient:
    """
    Thin client for an OpenAI-compatible chat completions endpoint.
    Every failure mode is raised as UpstreamUnavailable.
    """

    def __init__(
        self,
        api_url: str = config.LLM_API_URL,
        api_key: Optional[str] = config.LLM_API_KEY,
        model: str = config.LLM_MODEL,
        timeout: float = config.LLM_TIMEOUT_SECONDS,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": "Cut Sprint Nutrition Assistant",
        }

    def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = config.LLM_TEMPERATURE,
        max_tokens: int = config.LLM_MAX_TOKENS,
    ) -> str:
        if not self.api_key:
            raise UpstreamUnavailable("LLM API key is not configured")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            res = requests.post(self.api_url, json=payload, headers=self._headers(), timeout=self.timeout)
            res.raise_for_status()
            body = res.json()
        except requests.exceptions.Timeout as e:
            raise UpstreamUnavailable(f"LLM request timed out after {self.timeout}s") from e
        except requests.exceptions.HTTPError as e:
            raise UpstreamUnavailable(f"HTTP {res.status_code}: {res.text[:500]}") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise UpstreamUnavailable(f"LLM request failed: {e}") from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamUnavailable("Unexpected response shape from LLM") from e
        if not content:
            raise UpstreamUnavailable("Empty response from LLM")
        return content


def parse_json_content(content: str) -> Dict[str, Any]:
    """
    Parse model output that should be JSON, possibly wrapped in a markdown
    fence or surrounded by prose.
    """
    cleaned = _FENCE.sub("", content).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("LLM content is not bare JSON, searching for an object: %s", content[:200])

    match = _JSON_BLOCK.search(content)
    if not match:
        raise UpstreamUnavailable("No JSON object in LLM response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise UpstreamUnavailable("Could not parse JSON from LLM response") from e
