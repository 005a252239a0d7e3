"""
Monitoring Module - structured logging for AI operations.

Usage:
    from aistudio.ai.monitoring import ai_logger

    ai_logger.log_request(request_id, prompt, provider, model)
    ai_logger.log_response(request_id, response)
"""

from aistudio.ai.monitoring.logger import AILogger, ai_logger

__all__ = ["AILogger", "ai_logger"]
