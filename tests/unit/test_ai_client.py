# =============================================================================
# tests/unit/test_ai_client.py
# Unit Tests for AIServiceClient
# =============================================================================

import pytest
import requests

from loyalty_core.api import AIConfig, AIServiceClient, APIConfig
from loyalty_core.errors import AIServiceError, BackendRequestError, ResponseValidationError


@pytest.fixture
def ai_client(http_session):
    return AIServiceClient(
        APIConfig(api_name="AI service", base_url="http://ai.test", timeout=15),
        session=http_session,
    )


class TestAnalyses:
    """Test payload mapping and per-endpoint timeouts"""

    def test_sentiment_defaults(self, ai_client, http_session, make_response, last_request):
        http_session.request.return_value = make_response(body={"sentiment": "positive", "score": 0.9})

        result = ai_client.analyze_sentiment("Loved it")

        assert result.sentiment == "positive"
        assert result.confidence == 0.85
        assert result.emotional_tone == "neutral"
        call = last_request(http_session)
        assert call["timeout"] == 15
        assert call["json"]["model"] == "bert-finetuned"

    def test_sentiment_empty_body(self, ai_client, http_session, make_response):
        http_session.request.return_value = make_response(200)

        with pytest.raises(AIServiceError):
            ai_client.analyze_sentiment("Loved it")

    def test_recommendations_mapped(self, ai_client, http_session, make_response, last_request):
        http_session.request.return_value = make_response(body={"recommendations": [{
            "id": "r1", "type": "OFFER", "title": "Double points", "description": "Weekend",
            "confidence": 0.9, "priority": "HIGH", "action_required": True,
            "estimated_value": 40, "category": "Dining",
        }]})

        recs = ai_client.generate_recommendations("u1", {"pointsBalance": 100})

        assert recs[0].action_required
        assert recs[0].estimated_value == 40.0
        call = last_request(http_session)
        assert call["timeout"] == 20
        assert call["json"]["max_recommendations"] == 5

    def test_malformed_recommendation_raises(self, ai_client, http_session, make_response):
        http_session.request.return_value = make_response(body={"recommendations": [
            {"id": "r1", "confidence": "very high"},
        ]})

        with pytest.raises(ResponseValidationError):
            ai_client.generate_recommendations("u1", {})

    def test_missing_envelope_raises(self, ai_client, http_session, make_response):
        http_session.request.return_value = make_response(body={"status": "ok"})

        with pytest.raises(AIServiceError):
            ai_client.generate_predictive_insights("u1", {})

    def test_behavior_timeout(self, ai_client, http_session, make_response, last_request):
        http_session.request.return_value = make_response(body={"patterns": [
            {"category": "Dining", "frequency": 3, "average_value": 12.5,
             "trend": "INCREASING", "seasonality": False},
        ]})

        patterns = ai_client.analyze_user_behavior("u1", {})

        assert patterns[0].trend == "INCREASING"
        assert last_request(http_session)["timeout"] == 30

    def test_transport_error_propagates(self, ai_client, http_session):
        http_session.request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(BackendRequestError):
            ai_client.generate_recommendations("u1", {})

    def test_finetune_returns_false_on_failure(self, ai_client, http_session):
        http_session.request.side_effect = requests.exceptions.ConnectionError("down")

        assert ai_client.finetune_model("sentiment", []) is False


class TestConnectivity:

    def test_initialize_records_unreachable_service(self, ai_client, http_session):
        http_session.request.side_effect = requests.exceptions.ConnectionError("down")

        status = ai_client.initialize()

        assert status == {"openai": False, "python_ai": False, "initialized": True}

    def test_initialize_healthy(self, ai_client, http_session, make_response):
        http_session.request.return_value = make_response(body={"status": "healthy"})

        assert ai_client.initialize()["python_ai"]

    def test_update_config(self, ai_client):
        config = ai_client.update_config(temperature=0.2)

        assert config.temperature == 0.2
        assert config.model == AIConfig().model
