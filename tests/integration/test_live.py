"""
Integration tests against a real Copilot Studio agent.

Requires environment variables:
  COPILOT_CLIENT_ID       — app registration (public client) id
  COPILOT_TENANT_ID       — Entra tenant id
  COPILOT_BOT_IDENTIFIER  — agent schema name
  COPILOT_ENVIRONMENT_ID  — Power Platform environment id

The first run opens a browser for sign-in.

Run: COPILOT_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from copilot_chat import AgentConfig, create_client

SKIP = not os.environ.get("COPILOT_INTEGRATION")

pytestmark = pytest.mark.skipif(SKIP, reason="COPILOT_INTEGRATION not set")


class TestLiveConversation:
    @pytest.mark.asyncio
    async def test_two_turns_share_conversation(self):
        async with create_client(AgentConfig.from_env()) as client:
            assert client.validate_config().is_valid, client.validate_config().errors

            first = await client.send_message("Hello", True)
            assert first.success, first.message_text
            assert first.conversation_id != "error"
            assert first.metadata.activities_count > 0

            second = await client.send_message("What can you help me with?", True)
            assert second.success, second.message_text
            assert second.conversation_id == first.conversation_id
            assert client.authenticator.get_token_info().is_valid

    @pytest.mark.asyncio
    async def test_new_conversation_on_request(self):
        async with create_client(AgentConfig.from_env()) as client:
            first = await client.send_message("Hello", True)
            second = await client.send_message("Hello again", False)
            assert first.success and second.success
            assert second.conversation_id != first.conversation_id
