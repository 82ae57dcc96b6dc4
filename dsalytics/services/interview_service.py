"""
Gemini-backed interview helper
Question selection from the problem catalog and free-text answer analysis
"""
import google.generativeai as genai
from dsalytics.config import settings
from dsalytics.services.problem_service import problem_service
import json
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)

# Configure Gemini API
genai.configure(api_key=settings.GEMINI_API_KEY)


class InterviewService:
    """Service for mock interview practice"""

    def __init__(self):
        self.model = genai.GenerativeModel(settings.GEMINI_MODEL)

    def pick_questions(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        count: int = 5
    ) -> List[Dict[str, Any]]:
        """
        Select interview questions from the problem catalog

        Args:
            category: Restrict to one category
            difficulty: easy/medium/hard
            count: Maximum number of questions

        Returns:
            Catalog problems in catalog order
        """
        problems = problem_service.filter_problems(
            problem_service.load_catalog(),
            difficulty=difficulty,
            category=category,
        )
        return problems[:count]

    def analyze_answer(self, question: str, answer: str) -> Dict[str, Any]:
        """
        Analyze a candidate's answer using Gemini

        Args:
            question: Interview question text
            answer: Candidate's answer

        Returns:
            Dictionary with score (0-100), key_points, improvements, feedback
        """
        prompt = f"""
You are a technical interviewer reviewing a candidate's answer.

**Question:** {question}
**Answer:** {answer}

Assess the answer and return ONLY valid JSON (no markdown):
{{
  "score": 85,
  "key_points": ["Point the candidate covered"],
  "improvements": ["What was missing or wrong"],
  "feedback": "Two or three sentences of feedback"
}}

The score is an integer from 0 to 100 reflecting accuracy and completeness.
"""
        try:
            response = self.model.generate_content(prompt)
            return self._parse_analysis(response.text)
        except Exception as e:
            logger.error(f"Failed to analyze answer: {str(e)}")
            return self._fallback_analysis()

    def _parse_analysis(self, response_text: str) -> Dict[str, Any]:
        """Parse Gemini's analysis response into structured format"""
        cleaned = response_text.strip()

        # Remove markdown code blocks
        if cleaned.startswith("```json"):
            cleaned = cleaned[7:-3].strip()
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:-3].strip()

        try:
            result = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse analysis JSON: {str(e)}")
            logger.error(f"Response text: {response_text[:500]}")
            return self._fallback_analysis()

        if not isinstance(result, dict):
            return self._fallback_analysis()

        try:
            score = int(round(float(result.get("score", 0))))
        except (TypeError, ValueError):
            score = 0

        return {
            "score": max(0, min(100, score)),
            "key_points": [str(p) for p in result.get("key_points") or []],
            "improvements": [str(p) for p in result.get("improvements") or []],
            "feedback": str(result.get("feedback") or "No feedback provided"),
        }

    def _fallback_analysis(self) -> Dict[str, Any]:
        return {
            "score": 0,
            "key_points": [],
            "improvements": [],
            "feedback": "Automatic analysis is unavailable right now. Please try again later.",
        }


# Global instance
interview_service = InterviewService()
