from dataclasses import dataclass
from typing import Callable, ContextManager, Optional

from core.config_loader import AppConfig, LlmConfig
from core.llm.circuit_breaker import UserCircuitBreaker
from core.llm.client import ResilientChatClient
from core.matcher.service import MatchingService
from core.scorer.service import QCSScoringService
from database.repository import ScoringRepository


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access is obtained via the
    unit-of-work factory inside each service call.
    """
    config: AppConfig
    scoring_service: QCSScoringService
    matching_service: MatchingService
    chat_client: Optional[ResilientChatClient] = None
    breaker: Optional[UserCircuitBreaker] = None

    @classmethod
    def build(
        cls,
        config: AppConfig,
        uow_factory: Optional[Callable[[], ContextManager[ScoringRepository]]] = None,
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            uow_factory: Unit-of-work factory; defaults to database.uow.scoring_uow

        Returns:
            Fully wired AppContext instance
        """
        if uow_factory is None:
            from database.uow import scoring_uow
            uow_factory = scoring_uow

        # Without an API key the AI phase is reported as disabled
        chat_client = cls._build_chat_client(config.llm)
        breaker = UserCircuitBreaker(uow_factory, config.circuit_breaker)

        scoring_service = QCSScoringService(
            config=config,
            uow_factory=uow_factory,
            chat_client=chat_client,
            breaker=breaker,
        )
        matching_service = MatchingService(uow_factory, config.matching)

        return cls(
            config=config,
            scoring_service=scoring_service,
            matching_service=matching_service,
            chat_client=chat_client,
            breaker=breaker,
        )

    @staticmethod
    def _build_chat_client(llm_config: LlmConfig) -> Optional[ResilientChatClient]:
        if not llm_config.api_key:
            return None
        return ResilientChatClient(llm_config)
