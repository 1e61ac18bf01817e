# gats_iqtest/core/prompts.py
from typing import List, Tuple
from .config import config
from ..models.schemas import UserProfile

NO_ANSWER = "No answer provided"

class PromptTemplates:
    """Centralized prompt template management"""

    @staticmethod
    def create_questions_prompt(question_count: int = None) -> str:
        """Create prompt for IQ question generation"""
        if question_count is None:
            question_count = config.QUESTIONS_PER_TEST

        return f"""Generate {question_count} IQ test questions that assess logical reasoning, pattern recognition, and problem-solving abilities.
Include a mix of multiple choice (with 4 options each) and short answer questions.
For multiple choice questions, include the options as an array.
For short answer questions, don't include options.
Format the response as a JSON array of objects with the following structure:
[
  {{
    "id": "unique-id",
    "type": "multiple_choice",
    "question": "question text",
    "options": ["option 1", "option 2", "option 3", "option 4"]
  }},
  {{
    "id": "unique-id",
    "type": "short_answer",
    "question": "question text"
  }}
]
Ensure each question id is unique. Make sure each question is challenging but fair, suitable for an adult IQ assessment.
Return only the JSON array."""

    @staticmethod
    def create_scoring_prompt(profile: UserProfile, qa_pairs: List[Tuple[str, str]]) -> str:
        """Create prompt for scoring a completed test"""
        qa_content = PromptFormatter.format_qa_pairs(qa_pairs)

        return f"""You're an IQ assessment expert. Given a user's answers to IQ test questions, calculate an estimated IQ score, provide an analysis, and generate a detailed explanation.

User Information:
- Name: {profile.name}
- Age: {profile.age}
- Gender: {profile.gender or "Not specified"}
- Country: {profile.country}
- Education: {profile.school}

Questions and Answers:
{qa_content}

Based on this information, please:
1. Calculate an estimated IQ score (between 85-145)
2. Determine the IQ category based on the score
3. Calculate the percentile (what percentage of the population has a lower score)
4. Provide performance percentages for different cognitive categories (Logical Reasoning, Pattern Recognition, Spatial Reasoning, Mathematical Ability)
5. Write a detailed explanation of the results (3-4 paragraphs)

Format your response as a JSON object with this structure:
{{
  "iqScore": 123,
  "iqCategory": "Superior Intelligence",
  "percentile": 92,
  "performance": [
    {{"category": "Logical Reasoning", "percentage": 88}},
    {{"category": "Pattern Recognition", "percentage": 92}},
    {{"category": "Spatial Reasoning", "percentage": 85}},
    {{"category": "Mathematical Ability", "percentage": 90}}
  ],
  "explanation": "Detailed multi-paragraph explanation of the results."
}}

Ensure the explanation is personalized based on the user's information and performance."""

class PromptFormatter:
    """Utility class for formatting prompt fragments"""

    @staticmethod
    def truncate(text: str, max_length: int) -> str:
        if len(text) <= max_length:
            return text
        return text[:max_length] + "..."

    @staticmethod
    def format_qa_pairs(qa_pairs: List[Tuple[str, str]], max_answer_length: int = None) -> str:
        if max_answer_length is None:
            max_answer_length = config.MAX_ANSWER_PROMPT_LENGTH

        blocks = []
        for question, answer in qa_pairs:
            answer = answer.strip() if answer else ""
            answer = PromptFormatter.truncate(answer, max_answer_length) if answer else NO_ANSWER
            blocks.append(f"Question: {question}\nUser's Answer: {answer}")
        return "\n\n".join(blocks)
