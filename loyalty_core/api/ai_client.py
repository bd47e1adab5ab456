"""
AI Microservice Client
Sentiment, recommendation, predictive-insight and behaviour endpoints

Each call is a single POST with its own timeout. Response payloads are
snake_case and are mapped onto the records in loyalty_core.models.
"""
from dataclasses import dataclass, replace
from typing import Optional, Dict, Any, List

import requests

from loyalty_core.errors import AIServiceError, BackendRequestError
from loyalty_core.logging import get_logger
from loyalty_core.models import (
    SentimentResult,
    AIRecommendation,
    PredictiveInsight,
    UserBehaviorPattern,
)
from .base_connector import BaseAPIConnector, APIConfig

logger = get_logger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1"

# Seconds; longer-running analyses get longer timeouts
HEALTH_TIMEOUT = 5
OPENAI_PROBE_TIMEOUT = 10
SENTIMENT_TIMEOUT = 15
RECOMMENDATIONS_TIMEOUT = 20
INSIGHTS_TIMEOUT = 25
BEHAVIOR_TIMEOUT = 30
FINETUNE_TIMEOUT = 60


@dataclass(frozen=True)
class AIConfig:
    openai_api_key: Optional[str] = None
    model: str = "gpt-4"
    max_tokens: int = 1000
    temperature: float = 0.7


class AIServiceClient(BaseAPIConnector):
    """
    Client for the analytics microservice.

    Usage:
        ai = AIServiceClient(APIConfig(api_name="AI service", base_url="http://localhost:8000"))
        ai.initialize()
        result = ai.analyze_sentiment("Loved the double points weekend!")
    """

    def __init__(
        self,
        config: APIConfig,
        ai_config: Optional[AIConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(config, session=session)
        self.ai_config = ai_config or AIConfig()
        self.is_initialized = False
        self.python_ai_available = False
        self.openai_available = False

    # =========================================================================
    # CONNECTIVITY
    # =========================================================================

    def initialize(self) -> Dict[str, bool]:
        """
        Probe the AI service (and OpenAI when a key is configured).

        Never raises; unreachable services are logged and recorded.
        """
        if self.ai_config.openai_api_key:
            self.openai_available = self._probe_openai()

        status = self.test_connection("health", timeout=HEALTH_TIMEOUT)
        self.python_ai_available = status["status"] == "success"
        if self.python_ai_available:
            logger.info("Python AI service connection successful")
        else:
            logger.warning(f"Python AI service unavailable: {status['message']}")

        self.is_initialized = True
        return self.get_service_status()

    def _probe_openai(self) -> bool:
        try:
            response = self.session.get(
                f"{OPENAI_API_URL}/models",
                headers={"Authorization": f"Bearer {self.ai_config.openai_api_key}"},
                timeout=OPENAI_PROBE_TIMEOUT,
            )
            response.raise_for_status()
            logger.info("OpenAI API connection successful")
            return True
        except requests.exceptions.RequestException as e:
            logger.warning(f"OpenAI API connection failed: {e}")
            return False

    def health(self) -> Any:
        return self._make_request("health", timeout=HEALTH_TIMEOUT)

    def get_service_status(self) -> Dict[str, bool]:
        return {
            "openai": bool(self.ai_config.openai_api_key),
            "python_ai": self.python_ai_available,
            "initialized": self.is_initialized,
        }

    def update_config(self, **changes: Any) -> AIConfig:
        self.ai_config = replace(self.ai_config, **changes)
        return self.ai_config

    # =========================================================================
    # ANALYSES
    # =========================================================================

    def analyze_sentiment(self, text: str) -> SentimentResult:
        data = self._make_request(
            "analyze-sentiment",
            method="POST",
            data={"text": text, "model": "bert-finetuned", "include_analysis": True},
            timeout=SENTIMENT_TIMEOUT,
        )
        if not data:
            raise AIServiceError(
                "No sentiment analysis data received from AI service",
                endpoint="analyze-sentiment",
            )
        return self._map_payload(SentimentResult.from_payload, data, "analyze-sentiment")

    def generate_recommendations(
        self,
        user_id: str,
        user_data: Dict[str, Any],
        max_recommendations: int = 5,
    ) -> List[AIRecommendation]:
        data = self._make_request(
            "generate-recommendations",
            method="POST",
            data={
                "user_id": user_id,
                "user_data": user_data,
                "model": "bert-recommendation",
                "max_recommendations": max_recommendations,
            },
            timeout=RECOMMENDATIONS_TIMEOUT,
        )
        items = self._envelope(data, "recommendations", "generate-recommendations")
        return self._map_payload(
            lambda rows: [AIRecommendation.from_payload(row) for row in rows],
            items,
            "generate-recommendations",
        )

    def generate_predictive_insights(
        self,
        user_id: str,
        user_data: Dict[str, Any],
    ) -> List[PredictiveInsight]:
        data = self._make_request(
            "predictive-insights",
            method="POST",
            data={
                "user_id": user_id,
                "user_data": user_data,
                "model": "bert-predictive",
                "prediction_horizon": "30_days",
            },
            timeout=INSIGHTS_TIMEOUT,
        )
        items = self._envelope(data, "insights", "predictive-insights")
        return self._map_payload(
            lambda rows: [PredictiveInsight.from_payload(row) for row in rows],
            items,
            "predictive-insights",
        )

    def analyze_user_behavior(
        self,
        user_id: str,
        user_data: Dict[str, Any],
    ) -> List[UserBehaviorPattern]:
        data = self._make_request(
            "analyze-behavior",
            method="POST",
            data={
                "user_id": user_id,
                "user_data": user_data,
                "model": "bert-behavior",
                "analysis_depth": "comprehensive",
            },
            timeout=BEHAVIOR_TIMEOUT,
        )
        items = self._envelope(data, "patterns", "analyze-behavior")
        return self._map_payload(
            lambda rows: [UserBehaviorPattern.from_payload(row) for row in rows],
            items,
            "analyze-behavior",
        )

    def finetune_model(self, model_type: str, training_data: Any) -> bool:
        """Kick off a fine-tuning run; returns False instead of raising."""
        try:
            self._make_request(
                "finetune-model",
                method="POST",
                data={
                    "model_type": model_type,
                    "training_data": training_data,
                    "hyperparameters": {
                        "learning_rate": 0.00001,
                        "batch_size": 16,
                        "epochs": 3,
                        "max_length": 512,
                    },
                },
                timeout=FINETUNE_TIMEOUT,
            )
            return True
        except BackendRequestError as e:
            logger.error(f"Model finetuning failed: {e}")
            return False

    @staticmethod
    def _envelope(data: Any, key: str, endpoint: str) -> List[Dict[str, Any]]:
        if not isinstance(data, dict) or data.get(key) is None:
            raise AIServiceError(
                f"No {key} data received from AI service",
                endpoint=endpoint,
            )
        return data[key]
