"""GraphQL Admin API client for Shopify."""

import json
from typing import Any

import aiohttp

from apps.shopify.config.settings import settings
from apps.shopify.utils.errors import ShopifyRequestError, ShopifyUserError
from common.binary_file import BinaryFile, to_form_field
from common.logger import logger


class ShopifyClient:
    """One authenticated session against the Admin GraphQL endpoint.

    Use as an async context manager:

        async with ShopifyClient() as client:
            data = await client.request(QUERY, {"id": product_id})
    """

    def __init__(self, store_domain: str | None = None, access_token: str | None = None, api_version: str | None = None):
        store_domain = store_domain or settings.SHOPIFY_STORE_DOMAIN
        access_token = access_token or settings.SHOPIFY_ACCESS_TOKEN
        api_version = api_version or settings.SHOPIFY_API_VERSION

        if not store_domain:
            raise ValueError("SHOPIFY_STORE_DOMAIN is required. Please set it in your environment or .env file.")
        if not access_token:
            raise ValueError("SHOPIFY_ACCESS_TOKEN is required. Please set it in your environment or .env file.")

        domain = store_domain.removeprefix("https://").rstrip("/")
        self.url = f"https://{domain}/admin/api/{api_version}/graphql.json"
        self.headers = {"Content-Type": "application/json", "X-Shopify-Access-Token": access_token}
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("Shopify client not initialized. Use async context manager.")
        return self.session

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a query or mutation and return its `data` object."""
        session = self._require_session()
        payload = {"query": query, "variables": variables or {}}

        try:
            async with session.post(self.url, headers=self.headers, json=payload) as response:
                text = await response.text()
                if response.status >= 400:
                    logger.debug(f"Shopify response body: {text}")
                    logger.error(f"Shopify request failed: {response.status} {response.reason}")
                    raise ShopifyRequestError(f"Shopify request failed: {response.status} {response.reason}", text)
        except aiohttp.ClientError as e:
            logger.error(f"Shopify network error: {e!s}")
            raise ShopifyRequestError(f"Shopify network error: {e!s}") from e

        try:
            body = json.loads(text)
        except json.JSONDecodeError as e:
            raise ShopifyRequestError(f"Shopify returned invalid JSON: {e}", text) from e

        handle_errors(body)
        return body.get("data") or {}

    async def post_form(self, url: str, fields: list[dict[str, str]], file: BinaryFile) -> None:
        """POST a multipart form to a staged upload target; the file goes last."""
        session = self._require_session()

        form = aiohttp.FormData()
        for field in fields:
            form.add_field(field["name"], field["value"])
        filename, data, content_type = to_form_field(file)
        form.add_field("file", data, filename=filename, content_type=content_type)

        try:
            async with session.post(url, data=form) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    logger.debug(f"Staged upload response body: {error_text}")
                    raise ShopifyRequestError(f"Failed to upload file to staged URL: {response.status} {response.reason}", error_text)
        except aiohttp.ClientError as e:
            logger.error(f"Staged upload network error: {e!s}")
            raise ShopifyRequestError(f"Failed to upload file to staged URL: {e!s}") from e


def handle_errors(body: dict[str, Any]) -> None:
    """Raise on a top-level GraphQL `errors` array, logging the full payload first."""
    errors = body.get("errors")
    if not errors:
        return

    logger.debug(f"GraphQL errors: {json.dumps(errors)}")
    if isinstance(errors, list):
        message = ", ".join(str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors)
    else:
        message = str(errors)
    logger.error(f"Shopify GraphQL error: {message}")
    raise ShopifyRequestError(message, errors)


def check_user_errors(result: dict[str, Any] | None, action: str) -> dict[str, Any]:
    """Return a mutation's payload, raising when it reports userErrors."""
    result = result or {}
    user_errors = result.get("userErrors") or []
    if user_errors:
        logger.error(f"Shopify rejected request to {action}: {user_errors}")
        raise ShopifyUserError(action, user_errors)
    return result
