"""
Gemini-based workout plan generation from the caller's goal and an exercise shortlist.
Output is a JSON plan; one attempt per request (retrying would spend generation quota silently).
"""
import asyncio
import json
import logging

import google.generativeai as genai
from pydantic import ValidationError

from app.config import settings
from app.core.errors import UpstreamError
from app.schemas.generator import GeneratedWorkoutPlan, WorkoutGenerationRequest
from app.services.gemini_common import run_generate_content

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.95,
    "max_output_tokens": 2048,
}

PROMPT_TEMPLATE = """You are a professional fitness coach. Create a personalized workout plan based on the user's goals.

USER INFORMATION:
- Fitness Goal: {goal}
- Available Time: {duration} minutes
- Target Muscle Groups: {target_muscles}
{instructions_line}
AVAILABLE EXERCISES (ID: Name):
{exercise_list}

TASK:
Select 5-8 exercises from the list above that best match the user's goals and target muscles.
For each exercise, specify the sets, reps, and rest time.

IMPORTANT: Return ONLY a valid JSON object with this exact structure:
{{
  "workoutName": "Creative workout name based on the goal",
  "workoutDescription": "Brief description of the workout",
  "exercises": [
    {{
      "exerciseId": exercise_id_from_the_list,
      "sets": 3,
      "reps": 12,
      "restTime": 60,
      "notes": "Brief note about form or tempo"
    }}
  ],
  "totalDuration": estimated_duration_in_minutes
}}

Do not include any markdown, explanations, or text outside the JSON object."""


def build_prompt(body: WorkoutGenerationRequest) -> str:
    exercise_list = "\n".join(f"{ex.id}: {ex.name}" for ex in body.exercises)
    instructions_line = f"- Additional Instructions: {body.instructions}\n" if body.instructions else ""
    return PROMPT_TEMPLATE.format(
        goal=body.goal,
        duration=body.duration,
        target_muscles=", ".join(body.target_muscles),
        instructions_line=instructions_line,
        exercise_list=exercise_list,
    )


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` (or bare ```) wrapper if the model added one."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else cleaned[3:]
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def parse_plan(text: str) -> GeneratedWorkoutPlan:
    """Parse model output into a plan. Any parse or shape failure is an UpstreamError."""
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise UpstreamError("AI returned an invalid workout plan") from e
    try:
        return GeneratedWorkoutPlan.model_validate(data)
    except ValidationError as e:
        raise UpstreamError("AI returned an incomplete workout plan") from e


async def generate_workout_plan(body: WorkoutGenerationRequest) -> GeneratedWorkoutPlan:
    if not settings.google_gemini_api_key:
        raise UpstreamError("AI workout generation is not configured")
    model = genai.GenerativeModel(settings.gemini_model, generation_config=GENERATION_CONFIG)
    try:
        response = await run_generate_content(model, build_prompt(body))
    except asyncio.TimeoutError as e:
        raise UpstreamError("AI workout generation timed out") from e
    except Exception as e:
        logger.exception("Gemini workout generation failed")
        raise UpstreamError("AI workout generation failed. Please try again.") from e
    try:
        text = response.text if response else ""
    except ValueError as e:  # blocked candidate: .text has no parts
        raise UpstreamError("AI response was blocked") from e
    if not text:
        raise UpstreamError("Empty response from AI")
    plan = parse_plan(text)
    allowed_ids = {ex.id for ex in body.exercises}
    if allowed_ids:
        unknown = [item.exercise_id for item in plan.exercises if item.exercise_id not in allowed_ids]
        if unknown:
            logger.warning("Gemini plan referenced exercises outside the shortlist: %s", unknown)
            plan.exercises = [item for item in plan.exercises if item.exercise_id in allowed_ids]
    return plan
