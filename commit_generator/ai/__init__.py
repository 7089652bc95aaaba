"""
AI client module for Commit Generator.

This module sends the staged diff to an OpenAI-compatible text-generation
service (Ollama by default) and returns the suggested commit message.
"""

import time
import logging
from typing import Optional
import openai

from ..exceptions import (
    ConfigurationError, EmptyResponseError, RateLimitExceededError, RequestFailedError
)
from ..config import GeneratorConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert DevOps engineer specialized in writing git commit messages."
)


def build_prompt(diff_text: str, rules_text: str = "") -> str:
    """
    Build the user prompt for commit message generation.

    Args:
        diff_text: Synthesized diff of the staged changes
        rules_text: Free-text team rules, may be empty

    Returns:
        Prompt text
    """
    sections = [
        "Analyze the following code diff.",
        "First, decide whether the diff is a single logical change or several "
        "independent changes that would be cleaner as separate commits.",
        "If it should be split, say so briefly and list the suggested commit scopes "
        "or purposes, without writing the commits themselves.",
        "If it is a single logical change, write one git commit message line "
        "following the Conventional Commits specification.",
        "Format for commit message:\n<type>(<scope>): <description>",
        "Allowed types: feat, fix, docs, style, refactor, test, chore.",
        "Output only the commit message or the split suggestion, nothing else.",
    ]
    if rules_text:
        sections.append(f"Team Rules:\n{rules_text}")
    sections.append(f"Diff:\n{diff_text}")
    return "\n\n".join(sections)


def is_split_suggestion(message: str) -> bool:
    """A multi-line answer suggests splitting the changes instead of a subject line."""
    return "\n" in message


class AIClient:
    """Client for AI-powered commit message generation."""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize AI client with configuration.

        Args:
            config: Commit Generator configuration

        Raises:
            ConfigurationError: If no API key is configured
        """
        self.config = config
        if not config.api_key:
            raise ConfigurationError(
                "OLLAMA_API_KEY environment variable is not set and not found in config. "
                "Set it with 'export OLLAMA_API_KEY=your_api_key' or add API_KEY to "
                ".commit-generator-config"
            )
        self._client = self._initialize_client()

    def _initialize_client(self) -> openai.OpenAI:
        """Initialize OpenAI client; retries are handled here, not by the SDK."""
        try:
            client = openai.OpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
            )
        except openai.OpenAIError as e:
            raise ConfigurationError(f"Failed to initialize OpenAI client: {e}")
        logger.debug("OpenAI client initialized successfully")
        return client

    def generate_commit_message(self, diff_text: str, rules_text: Optional[str] = None) -> str:
        """
        Generate commit message from the staged diff.

        Args:
            diff_text: Synthesized diff
            rules_text: Team rules to include in the prompt

        Returns:
            Generated commit message or split suggestion, stripped

        Raises:
            RateLimitExceededError: If the service keeps rate limiting
            RequestFailedError: If the request fails for any other reason
            EmptyResponseError: If the service returns no text
        """
        prompt = build_prompt(diff_text, rules_text or "")
        message = self._generate_with_retries(prompt)
        logger.info("Successfully generated commit message")
        return message

    def _generate_with_retries(self, prompt: str) -> str:
        """
        Call the service, retrying only rate-limited attempts.

        Waits retry_base_delay seconds before the first retry and doubles the
        wait for each further retry.
        """
        max_retries = self.config.max_retries

        for attempt in range(max_retries + 1):
            if attempt > 0:
                delay = self.config.retry_base_delay * (2 ** (attempt - 1))
                logger.warning(f"Rate limit hit. Retrying in {delay:g}s...")
                time.sleep(delay)

            try:
                logger.debug(f"Calling model {self.config.model} (attempt {attempt + 1})")
                response = self._client.chat.completions.create(
                    model=self.config.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    stream=False,
                )
            except openai.RateLimitError as e:
                if attempt == max_retries:
                    raise RateLimitExceededError(
                        f"API rate limit exceeded after {max_retries} retries: {e}")
                continue
            except openai.APIStatusError as e:
                raise RequestFailedError(f"API returned error: {e.status_code} ({e.message})")
            except openai.APIConnectionError as e:
                raise RequestFailedError(f"API call failed: {e}")
            except openai.OpenAIError as e:
                raise RequestFailedError(f"API call failed: {e}")

            return self._extract_message(response)

        raise RateLimitExceededError(f"API rate limit exceeded after {max_retries} retries")

    def _extract_message(self, response) -> str:
        if not response.choices:
            raise EmptyResponseError("empty response from model")
        content = response.choices[0].message.content or ""
        if not content.strip():
            raise EmptyResponseError("empty response from model")
        logger.debug(f"Raw response: {content}")
        return content.strip()

    def test_connection(self) -> bool:
        """
        Test connection to AI service.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            logger.info("Testing AI service connection...")
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": "You are a helpful assistant."},
                    {"role": "user", "content": "Say 'test' and nothing else."}
                ],
                max_tokens=10,
            )
            result = (response.choices[0].message.content or "").strip().lower()
        except openai.OpenAIError as e:
            logger.error(f"AI service connection test failed: {e}")
            return False

        success = "test" in result
        if not success:
            logger.warning(f"AI service connection test failed: unexpected response '{result}'")
        return success
