"""
AI Insight Agent

Asks Gemini for a short, friendly reading of one month of the flat.

CRITICAL BOUNDARIES:
- CAN: Comment on numbers that were already computed by the summary engine
- CANNOT: Change the ledger (it only ever sees a frozen payload of strings)
- NEVER raises: a missing key, a network error or an empty answer all come
  back as an explanatory text the UI can show as-is

The insight is decoration. Nothing in the ledger waits for it or depends
on it being correct.
"""

import asyncio
from typing import Optional

import google.generativeai as genai
from pydantic import BaseModel, ConfigDict

from src.config import GeminiSettings, get_settings
from src.currency import CurrencyMaskCodec
from src.models.ledger import MonthRecord
from src.observability import LedgerEventLogger
from src.summary import summarize


MISSING_KEY_MESSAGE = (
    "A chave de API (GEMINI_API_KEY) não foi configurada no ambiente."
)
EMPTY_RESPONSE_MESSAGE = "Não foi possível gerar uma resposta clara."
SERVICE_ERROR_MESSAGE = (
    "Ocorreu um erro ao consultar a IA. Verifique os logs ou a validade "
    "da sua GEMINI_API_KEY."
)


class InsightServiceError(Exception):
    """The insight service could not produce a text."""
    pass


class InsightPayload(BaseModel):
    """
    Snapshot of a month handed to the insight service.

    Every money value is already formatted for display; the service
    never sees the record itself.
    """
    model_config = ConfigDict(frozen=True)

    record_id: str
    month_label: str
    year: int
    total_revenue: str
    total_expenses: str
    admin_fee_percent: int
    admin_fee_amount: str
    net_profit: str
    partners_count: int

    @classmethod
    def from_record(cls, record: MonthRecord, codec: CurrencyMaskCodec) -> "InsightPayload":
        summary = summarize(record)
        return cls(
            record_id=record.id,
            month_label=record.month.value,
            year=record.year,
            total_revenue=codec.format_currency(summary.total_revenue),
            total_expenses=codec.format_currency(summary.total_expenses),
            admin_fee_percent=record.admin_fee_percent,
            admin_fee_amount=codec.format_currency(summary.admin_fee_amount),
            net_profit=codec.format_currency(summary.net_profit),
            partners_count=record.partners_count,
        )


class InsightResult(BaseModel):
    """Text to display, and whether it came from the model."""

    text: str
    from_model: bool
    error: Optional[str] = None


def build_prompt(payload: InsightPayload) -> str:
    """Prompt sent to Gemini for one month."""
    return f"""
    Analise os seguintes dados financeiros de um flat de aluguel por temporada (Airbnb) para o mês de {payload.month_label}/{payload.year}:
    - Faturamento Bruto (Airbnb): {payload.total_revenue}
    - Despesas Totais: {payload.total_expenses}
    - Taxa de Administração ({payload.admin_fee_percent}% sobre o Bruto): {payload.admin_fee_amount}
    - Lucro Líquido Final (para distribuição entre {payload.partners_count} sócios): {payload.net_profit}

    Por favor, forneça um resumo amigável e direto em português (máximo 3 parágrafos) para o dono do flat.
    Diga se o mês foi bom comparando o lucro com o faturamento, dê um conselho simples para melhorar e ressalte o Lucro Líquido que sobrou no bolso.
    Foque na saúde financeira do flat e mantenha um tom profissional.
    """


class InsightAgent:
    """
    AI agent producing the month insight text.

    RESPONSIBILITIES:
    - Turn an InsightPayload into a prompt
    - Call Gemini once
    - Downgrade every failure to a fallback text
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._events = event_logger or LedgerEventLogger()
        self._model = None

    def _configure_genai(self):
        """Configure Google Generative AI (only once a key is known)."""
        if self._model is None:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                }
            )
        return self._model

    async def _generate(self, prompt: str) -> str:
        """
        Call the model.

        Raises:
            InsightServiceError: On any service failure or empty answer
        """
        try:
            model = self._configure_genai()
            response = await model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            raise InsightServiceError(str(e)) from e

        if not text:
            raise InsightServiceError("Empty response from model")
        return text

    async def generate_insight(self, payload: InsightPayload) -> InsightResult:
        """Produce the insight text for a month. Never raises."""
        if not self._settings.api_key:
            return InsightResult(
                text=MISSING_KEY_MESSAGE,
                from_model=False,
                error="missing_api_key",
            )

        try:
            text = await self._generate(build_prompt(payload))
        except InsightServiceError as e:
            self._events.log_insight_failed(payload.record_id, str(e))
            fallback = (
                EMPTY_RESPONSE_MESSAGE
                if str(e) == "Empty response from model"
                else SERVICE_ERROR_MESSAGE
            )
            return InsightResult(text=fallback, from_model=False, error=str(e))

        return InsightResult(text=text, from_model=True)


class InsightRequest:
    """
    One-shot, cancellable insight request.

    Closing the insight view calls cancel(); the pending answer is
    discarded. Must be created inside a running event loop.
    """

    def __init__(self, agent: InsightAgent, payload: InsightPayload):
        self.payload = payload
        self._task: asyncio.Task = asyncio.ensure_future(agent.generate_insight(payload))

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    def cancel(self) -> None:
        self._task.cancel()

    async def result(self) -> Optional[InsightResult]:
        """The insight, or None if the request was cancelled."""
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._task.cancelled():
                return None
            raise
