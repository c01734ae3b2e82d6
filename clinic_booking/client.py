"""
Chat client - talks to the chat API over HTTP.

Consumes the menu sentinel: a reply ending with it is shown without the
marker and followed by the top-level menu.
"""

import asyncio
from typing import Optional

import httpx
from loguru import logger
from pydantic import BaseModel

from clinic_booking.config import MENU_SENTINEL, MENU_TEXT, get_settings


class ChatReply(BaseModel):
    """A reply split into display text and the back-to-menu hint."""

    text: str
    back_to_menu: bool = False


def split_menu_sentinel(reply: str) -> ChatReply:
    """Strip a trailing menu sentinel from a reply."""
    if reply.endswith(MENU_SENTINEL):
        return ChatReply(text=reply[: -len(MENU_SENTINEL)], back_to_menu=True)
    return ChatReply(text=reply)


class ChatClient:
    """
    Async client for the chat API.
    """

    def __init__(self, cpf: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = get_settings()
        self.cpf = cpf
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.chat_api_url,
                timeout=httpx.Timeout(self.settings.chat_api_timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send(self, message: str) -> ChatReply:
        """
        Send one turn and return the parsed reply.

        Raises:
            httpx.HTTPError: on transport failure or a non-2xx response
        """
        client = await self._get_client()

        try:
            response = await client.post("/chat", json={"cpf": self.cpf, "message": message})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error sending chat message: {e}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error sending chat message: {e}")
            raise

        return split_menu_sentinel(response.json()["reply"])


async def run_console(cpf: str) -> None:
    """Interactive terminal chat until EOF or 'sair'."""
    client = ChatClient(cpf)
    print(MENU_TEXT)

    try:
        while True:
            try:
                message = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if message.strip().lower() == "sair":
                break

            try:
                reply = await client.send(message)
            except httpx.HTTPError:
                print("Não foi possível falar com o servidor. Tente novamente.")
                continue

            print(reply.text)
            if reply.back_to_menu:
                print()
                print(MENU_TEXT)
    finally:
        await client.close()
