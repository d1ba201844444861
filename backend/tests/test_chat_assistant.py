"""
TESTES - ASSISTENTE DO CORRETOR
===============================

Loop de function calling com o provedor LLM mockado.
"""

import json
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from corretor.domain.entities import AIConversation
from corretor.domain.prompts.chat_prompts import SYSTEM_PROMPT, build_system_prompt
from corretor.infrastructure.services.chat_assistant_service import (
    ChatAssistantService,
    ChatResult,
    collect_property_ids,
    filter_ui_messages,
)
from tests.conftest import TransactionalSession, make_result

SERVICE = "corretor.infrastructure.services.chat_assistant_service"


def _tool_call(name: str, args: dict, call_id: str = "call_1") -> dict:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(args)},
    }


def _response(content="", tool_calls=None, tokens=50) -> dict:
    return {
        "content": content,
        "tokens_used": tokens,
        "tool_calls": tool_calls,
        "finish_reason": "tool_calls" if tool_calls else "stop",
    }


# =============================================================================
# MENSAGENS
# =============================================================================

def test_filter_ui_messages_drops_welcome():
    messages = [
        {"id": "welcome", "role": "assistant", "content": "Olá! Como posso ajudar?"},
        {"id": "1", "role": "user", "parts": [{"type": "text", "text": "Quero "}, {"type": "text", "text": "um apto"}]},
        {"id": "2", "role": "assistant", "content": "Claro!"},
        {"id": "3", "role": "data", "content": "ignorado"},
    ]

    assert filter_ui_messages(messages) == [
        {"role": "user", "content": "Quero um apto"},
        {"role": "assistant", "content": "Claro!"},
    ]


def test_collect_property_ids():
    assert collect_property_ids("searchProperties", [{"id": "a"}, {"id": "b"}]) == ["a", "b"]
    assert collect_property_ids("findPropertiesForClient", {"properties": [{"id": "c"}]}) == ["c"]
    assert collect_property_ids("getPropertyDetails", {"id": "d"}) == ["d"]
    assert collect_property_ids("searchProperties", {"error": "Nenhum imóvel"}) == []
    assert collect_property_ids("captureLead", {"clientId": "x"}) == []


def test_system_prompt_with_client(make_client):
    client = make_client(budget_max=500000, preferred_neighborhoods=["Anhangabaú"], min_bedrooms=2)

    prompt = build_system_prompt(client)

    assert prompt.startswith(SYSTEM_PROMPT)
    assert "**CONTEXTO DO CLIENTE ATIVO:**" in prompt
    assert "- Orçamento: Não especificado - R$ 500.000,00" in prompt
    assert "- Bairros preferidos: Anhangabaú" in prompt
    assert "- Mínimo de quartos: 2" in prompt
    assert build_system_prompt(None) == SYSTEM_PROMPT


# =============================================================================
# LOOP DE TOOLS
# =============================================================================

@pytest.mark.asyncio
async def test_text_answer_in_one_step(db_session, fake_llm):
    fake_llm.chat_completion.return_value = _response("Olá, corretor!")

    service = ChatAssistantService(db_session)
    result = await service.run([{"role": "user", "content": "Oi"}])

    assert result.text == "Olá, corretor!"
    assert result.steps == 1
    assert result.tool_calls == []

    kwargs = fake_llm.chat_completion.call_args.kwargs
    assert kwargs["tool_choice"] == "auto"
    assert kwargs["messages"][0]["role"] == "system"
    assert len(kwargs["tools"]) == 9


@pytest.mark.asyncio
async def test_tool_call_then_answer(db_session, fake_llm):
    fake_llm.chat_completion.side_effect = [
        _response(tool_calls=[_tool_call("searchProperties", {"city": "Jundiaí"})]),
        _response("Encontrei 1 imóvel."),
    ]
    tool_result = [{"id": "prop-1", "title": "Apto"}]

    with patch(f"{SERVICE}.execute_tool", AsyncMock(return_value=tool_result)) as mock_execute:
        service = ChatAssistantService(db_session)
        result = await service.run([{"role": "user", "content": "Apartamentos em Jundiaí"}])

    assert result.text == "Encontrei 1 imóvel."
    assert result.steps == 2
    assert result.tokens_used == 100
    assert result.tool_calls == [{"toolName": "searchProperties", "args": {"city": "Jundiaí"}}]
    assert service.related_property_ids == ["prop-1"]
    assert mock_execute.call_args.args[:2] == ("searchProperties", {"city": "Jundiaí"})

    second_messages = fake_llm.chat_completion.call_args_list[1].kwargs["messages"]
    assert second_messages[-2]["role"] == "assistant"
    assert second_messages[-1] == {
        "role": "tool",
        "tool_call_id": "call_1",
        "name": "searchProperties",
        "content": json.dumps(tool_result, ensure_ascii=False),
    }


@pytest.mark.asyncio
async def test_invalid_tool_arguments(db_session, fake_llm):
    bad_call = {"id": "call_x", "type": "function", "function": {"name": "getClientInfo", "arguments": "{nope"}}
    fake_llm.chat_completion.side_effect = [_response(tool_calls=[bad_call]), _response("Desculpe.")]

    with patch(f"{SERVICE}.execute_tool", AsyncMock()) as mock_execute:
        result = await ChatAssistantService(db_session).run([{"role": "user", "content": "?"}])

    mock_execute.assert_not_called()
    assert result.tool_calls == [{"toolName": "getClientInfo", "args": None}]
    assert result.text == "Desculpe."


@pytest.mark.asyncio
async def test_stops_at_max_steps(db_session, fake_llm):
    fake_llm.chat_completion.return_value = _response(tool_calls=[_tool_call("getMarketInsights", {})])

    with patch(f"{SERVICE}.execute_tool", AsyncMock(return_value={"error": "sem dados"})):
        result = await ChatAssistantService(db_session, max_steps=3).run([{"role": "user", "content": "?"}])

    assert result.steps == 3
    assert result.text == ""
    assert fake_llm.chat_completion.call_count == 3


@pytest.mark.asyncio
async def test_load_client_handles_errors(db_session):
    db_session.execute.side_effect = RuntimeError("db fora")

    assert await ChatAssistantService(db_session).load_client(uuid.uuid4()) is None


# =============================================================================
# PERSISTÊNCIA
# =============================================================================

@pytest.mark.asyncio
async def test_save_conversation(db_session, make_client):
    agent = SimpleNamespace(id=uuid.uuid4())
    client = make_client()
    service = ChatAssistantService(db_session, agent=agent)
    service.related_property_ids = ["a", "b", "a"]
    result = ChatResult(
        text="Pronto!",
        steps=2,
        tool_calls=[{"toolName": "searchProperties", "args": {}}],
        tokens_used=80,
    )

    conversation = await service.save_conversation(
        [{"id": "welcome", "role": "assistant", "content": "Oi"}, {"role": "user", "content": "Busca"}],
        result,
        client,
    )

    assert isinstance(conversation, AIConversation)
    assert conversation.user_id == agent.id
    assert conversation.client_id == client.id
    assert conversation.conversation_type == "client"
    assert conversation.messages == [
        {"role": "user", "content": "Busca"},
        {"role": "assistant", "content": "Pronto!"},
    ]
    assert conversation.related_property_ids == ["a", "b"]
    assert conversation.extra_metadata["tool_calls"] == ["searchProperties"]
    assert conversation.extra_metadata["tokens_used"] == 80
    db_session.add.assert_called_once_with(conversation)


@pytest.mark.asyncio
async def test_rejected_tool_write_keeps_chat_and_history(fake_llm, make_client):
    client = make_client()
    session = TransactionalSession(
        results=[make_result(scalar=None), make_result(scalar=client)],
        flush_errors=[IntegrityError("INSERT INTO property_matches", {}, Exception("violates foreign key constraint"))],
    )
    fake_llm.chat_completion.side_effect = [
        _response(tool_calls=[_tool_call(
            "recordPropertyInterest",
            {"clientId": str(client.id), "propertyId": str(uuid.uuid4()), "interestLevel": "high"},
        )]),
        _response(tool_calls=[_tool_call("getClientInfo", {"clientId": str(client.id)}, "call_2")]),
        _response("Não consegui registrar o interesse, mas a Maria segue ativa."),
    ]
    ui_messages = [{"role": "user", "content": "Registra o interesse da Maria"}]

    service = ChatAssistantService(session)
    result = await service.run(ui_messages)
    conversation = await service.save_conversation(ui_messages, result)

    last_messages = fake_llm.chat_completion.call_args_list[2].kwargs["messages"]
    tool_messages = [m for m in last_messages if m["role"] == "tool"]
    assert "Erro ao registrar interesse" in tool_messages[0]["content"]
    assert json.loads(tool_messages[1]["content"])["name"] == "Maria Souza"
    assert result.steps == 3
    assert result.text == "Não consegui registrar o interesse, mas a Maria segue ativa."
    assert session.added[-1] is conversation
