"""
Text-generation client for OpenAI-compatible chat APIs with response caching.
"""
import os
import json
import time
import hashlib
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from openai import AsyncOpenAI, APIConnectionError, OpenAIError, RateLimitError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from huridocs_intake.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into generated text."""

    async def generate(self, prompt: str, model: Optional[str] = None, max_tokens: int = 1024,
                       validate: Optional[Callable[[str], Any]] = None) -> str:
        ...


class TextGenerationClient:
    """OpenAI chat client with optional Cloudflare gateway, disk cache and bounded retries."""

    def __init__(self, cache_dir: Optional[Path] = None, model: str = 'gpt-4o-mini',
                 max_attempts: int = 1, timeout: float = 60.0, client: Optional[AsyncOpenAI] = None):
        self.cache_dir = cache_dir
        self.model = model
        self.max_attempts = max(1, max_attempts)

        if client is not None:
            self.client = client
        else:
            # Route through Cloudflare AI Gateway when configured
            account_id = os.getenv('CLOUDFLARE_ACCOUNT_ID')
            gateway_id = os.getenv('CLOUDFLARE_GATEWAY_ID')

            if account_id and gateway_id and account_id != '{account_id}' and gateway_id != '{gateway_id}':
                base_url = f"https://gateway.ai.cloudflare.com/v1/{account_id}/{gateway_id}/openai"
                self.client = AsyncOpenAI(base_url=base_url, timeout=timeout, max_retries=0)
                logger.info("Using Cloudflare AI Gateway")
            else:
                self.client = AsyncOpenAI(timeout=timeout, max_retries=0)
                logger.info("Using direct OpenAI API")

    def _cache_file(self, prompt: str, model: str, max_tokens: int) -> Optional[Path]:
        if self.cache_dir is None:
            return None
        key = hashlib.sha256(f"{model}\n{max_tokens}\n{prompt}".encode('utf-8')).hexdigest()
        return self.cache_dir / f'{key}.json'

    def _read_cache(self, cache_file: Optional[Path]) -> Optional[str]:
        if cache_file is None or not cache_file.exists():
            return None
        try:
            return json.loads(cache_file.read_text(encoding='utf-8'))['content']
        except (OSError, ValueError, KeyError) as e:
            logger.debug(f"Ignoring unreadable cache entry {cache_file.name}: {e}")
            return None

    def _write_cache(self, cache_file: Optional[Path], content: str):
        if cache_file is None:
            return
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(json.dumps({'content': content, 'ts': time.time()}), encoding='utf-8')
        except OSError as e:
            logger.warning(f"Could not write cache entry {cache_file.name}: {e}")

    @staticmethod
    def _is_valid(content: str, validate: Optional[Callable[[str], Any]]) -> bool:
        if validate is None:
            return True
        try:
            validate(content)
        except Exception as e:
            logger.info(f"Reply rejected by validator, not caching: {e}")
            return False
        return True

    async def generate(self, prompt: str, model: Optional[str] = None, max_tokens: int = 1024,
                       temperature: float = 0.3, cache: bool = True,
                       validate: Optional[Callable[[str], Any]] = None) -> str:
        """Send a single-prompt chat completion and return the reply text.

        Only replies accepted by ``validate`` (when given) are cached, and
        cached replies it rejects are fetched again.
        """
        model = model or self.model
        cache_file = self._cache_file(prompt, model, max_tokens) if cache else None

        cached = self._read_cache(cache_file)
        if cached is not None and self._is_valid(cached, validate):
            logger.debug("Cache hit for prompt")
            return cached

        start_time = time.time()
        try:
            async for attempt in AsyncRetrying(
                wait=wait_random_exponential(min=0.1, max=10),
                stop=stop_after_attempt(self.max_attempts),
                retry=retry_if_exception_type((RateLimitError, APIConnectionError)),
                reraise=True,
            ):
                with attempt:
                    resp = await self.client.chat.completions.create(
                        model=model,
                        messages=[{'role': 'user', 'content': prompt}],
                        max_tokens=max_tokens,
                        temperature=temperature,
                    )
        except OpenAIError as e:
            logger.error(f"Text generation failed after {time.time() - start_time:.1f}s: {e}")
            raise UpstreamError(str(e)) from e

        content = (resp.choices[0].message.content or '').strip()
        logger.info(f"Generated {len(content)} chars in {time.time() - start_time:.1f}s")

        if content and self._is_valid(content, validate):
            self._write_cache(cache_file, content)
        return content
