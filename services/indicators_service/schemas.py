from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, computed_field, model_validator


# Метрики ONS и регионы PLD в фиксированном порядке
ONS_METRICS = ("ear", "carga", "geracao")
PLD_REGIONS = ("sudeste", "sul", "nordeste", "norte")


# ------------------------------------------------------------
#  ИНДИКАТОРЫ ИЗ ВНЕШНИХ ИСТОЧНИКОВ
# ------------------------------------------------------------

class OnsData(BaseModel):
    """
    Индикаторы ONS: запасённая энергия (EAR), нагрузка и генерация.
    estimated_fields перечисляет метрики, подставленные fallback-оценщиком
    вместо реального значения.
    """
    ear: float = Field(ge=0, le=100, description="Energia Armazenada, % от ёмкости")
    carga: float = Field(ge=0, description="Нагрузка (carga), MW")
    geracao: float = Field(ge=0, description="Генерация (geração), MW")
    data_referencia: date = Field(description="Дата, к которой относятся значения")
    estimated_fields: list[str] = Field(
        default_factory=list,
        description="Метрики, взятые из fallback-оценки",
    )


class PldData(BaseModel):
    """
    PLD (Preço de Liquidação das Diferenças) по четырём подсистемам, R$/MWh.
    media всегда пересчитывается из четырёх регионов и не задаётся извне.
    """
    sudeste: float = Field(ge=0)
    sul: float = Field(ge=0)
    nordeste: float = Field(ge=0)
    norte: float = Field(ge=0)
    data_referencia: date
    estimated_fields: list[str] = Field(
        default_factory=list,
        description="Регионы, взятые из fallback-оценки",
    )

    @computed_field
    @property
    def media(self) -> float:
        """Среднее по четырём регионам, округлённое до 2 знаков."""
        total = self.sudeste + self.sul + self.nordeste + self.norte
        return round(total / 4, 2)


# ------------------------------------------------------------
#  ТАРИФНЫЙ ФЛАГ (BANDEIRA TARIFÁRIA)
# ------------------------------------------------------------

class TariffTier(str, Enum):
    """Уровни флага, упорядоченные по тяжести: verde < amarela < vermelha-1 < vermelha-2."""
    VERDE = "verde"
    AMARELA = "amarela"
    VERMELHA_1 = "vermelha-1"
    VERMELHA_2 = "vermelha-2"

    @property
    def severity(self) -> int:
        return list(TariffTier).index(self)

    def __lt__(self, other):
        if not isinstance(other, TariffTier):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other):
        if not isinstance(other, TariffTier):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other):
        if not isinstance(other, TariffTier):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other):
        if not isinstance(other, TariffTier):
            return NotImplemented
        return self.severity >= other.severity


class BandeiraTarifaria(BaseModel):
    tipo: TariffTier = Field(description="Уровень флага")
    valor: float = Field(ge=0, description="Надбавка, R$ за 100 kWh")
    mes: str = Field(description="Месяц (название на португальском)")
    ano: int = Field(description="Год")


# ------------------------------------------------------------
#  РЕЗУЛЬТАТЫ ШАГОВ ОБНОВЛЕНИЯ
# ------------------------------------------------------------

class StepResult(BaseModel):
    """
    Результат одного шага обновления.
    Успешный шаг обязан нести payload, неуспешный — непустое сообщение об ошибке.
    """
    PAYLOAD_FIELD: ClassVar[str] = "data"

    success: bool
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_payload_or_error(self):
        payload = getattr(self, self.PAYLOAD_FIELD, None)
        if payload is None and not self.error:
            raise ValueError("step result without payload must carry an error message")
        if self.success and payload is None:
            raise ValueError("successful step result must carry a payload")
        return self


class OnsStepResult(StepResult):
    data: Optional[OnsData] = None


class PldStepResult(StepResult):
    data: Optional[PldData] = None


class BandeiraStepResult(StepResult):
    data: Optional[BandeiraTarifaria] = None


class CleanupStepResult(StepResult):
    PAYLOAD_FIELD: ClassVar[str] = "deleted_records"

    deleted_records: Optional[int] = Field(default=None, ge=0)


# ------------------------------------------------------------
#  ВХОД / ВЫХОД ЭНДПОЙНТОВ
# ------------------------------------------------------------

class UpdateRequest(BaseModel):
    """
    Тело запроса на обновление индикаторов.
    force пока не влияет на логику и принимается для совместимости.
    """
    force: bool = False


class IndicatorsUpdateResult(BaseModel):
    """Сводный отчёт обновления: каждый шаг успешен или нет независимо от других."""
    timestamp: datetime
    ons: OnsStepResult
    pld: PldStepResult
    bandeira: BandeiraStepResult
    cleanup: CleanupStepResult

    @computed_field
    @property
    def success(self) -> bool:
        return (
            self.ons.success
            and self.pld.success
            and self.bandeira.success
            and self.cleanup.success
        )


class CurrentIndicators(BaseModel):
    """Текущие индикаторы без housekeeping (read-only запрос)."""
    ons: OnsData
    pld: PldData
    bandeira: BandeiraTarifaria
    timestamp: datetime
