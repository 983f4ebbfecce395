"""
LLM-powered roster generator for the Child Immunization Tracker.
STRATEGY: 'Big Bang' Batching (1 Request per Category) to stay inside RPM limits.
The LLM only supplies names (villages, given names, family names); ages and
visit histories always come from the seeded VisitSimulator.
"""

import os
import json
import logging
import re
import google.generativeai as genai
from typing import List, Tuple, Any, Type
from pydantic import ValidationError, BaseModel, Field

from models import Village

logger = logging.getLogger(__name__)


class NameEntry(BaseModel):
    """One generated personal name, split for reuse across families."""
    first_name: str = Field(min_length=1, max_length=40)
    last_name: str = Field(min_length=1, max_length=40)


class DataGenerator:
    def __init__(self, api_key: str | None = None, model_name: str = "gemini-2.5-flash"):
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")

        genai.configure(api_key=self.api_key)
        self.model = genai.GenerativeModel(model_name)
        self.total_cost = 0.0

    def _estimate_cost(self, prompt_tokens: int, response_tokens: int) -> float:
        return (prompt_tokens * 0.075 + response_tokens * 0.30) / 1_000_000

    def _robust_parse_json(self, raw_text: str) -> List[Any]:
        """
        Handles Markdown stripping and shape normalization.
        """
        if not raw_text:
            return []

        # 1. Clean Markdown Code Blocks
        clean_text = re.sub(r"```json\s*|\s*```", "", raw_text).strip()

        try:
            data = json.loads(clean_text)
        except json.JSONDecodeError:
            # Fallback: Try to regex extract the main list
            match = re.search(r'(\[.*\])', clean_text, re.DOTALL)
            if not match:
                return []
            try:
                data = json.loads(match.group(1))
            except json.JSONDecodeError:
                return []

        # 2. Normalize Data Shape
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ['villages', 'names', 'people', 'result']:
                if key in data and isinstance(data[key], list):
                    return data[key]
            return [data]
        return []

    def _fetch_big_batch(self, prompt: str, model_class: Type[BaseModel]) -> Tuple[List[Any], float]:
        """
        Executes a generation request with robust parsing.
        Items that fail validation are skipped; a failed request yields an empty batch.
        """
        try:
            generation_config = genai.GenerationConfig(
                response_mime_type="application/json",
                max_output_tokens=8000,
                temperature=0.7
            )

            response = self.model.generate_content(prompt, generation_config=generation_config)

            cost = 0.0
            usage = getattr(response, 'usage_metadata', None)
            if usage is not None:
                cost = self._estimate_cost(usage.prompt_token_count, usage.candidates_token_count)
            self.total_cost += cost

            data_list = self._robust_parse_json(response.text)

            valid_items = []
            for i, item in enumerate(data_list):
                if not isinstance(item, dict):
                    logger.warning(f"Skipping non-object item {i} in batch")
                    continue
                try:
                    valid_items.append(model_class(**item))
                except ValidationError as e:
                    logger.warning(f"Skipping invalid item {i} in batch: {e.json()}")
                    continue

            return valid_items, cost

        except Exception as e:
            logger.error(f"Batch Generation Failed: {e}")
            return [], 0.0

    def generate_villages(self, count: int = 7) -> Tuple[List[Village], float]:
        """
        Generates rural village names with sequential codes V001, V002, ...
        """
        prompt = f"""
        Generate {count} realistic rural village names from North India.
        OUTPUT: JSON Array.
        RULES:
        - "village_id": Must be a STRING of the form "V001", "V002", ... numbered sequentially from V001.
        - "name": Single village name, no district or state.
        FIELDS: village_id, name.
        """
        logger.info(f"Requesting {count} villages...")
        villages, cost = self._fetch_big_batch(prompt, Village)

        # Keep only the first occurrence of each code
        unique = {}
        for v in villages:
            unique.setdefault(v.village_id, v)
        return sorted(unique.values(), key=lambda v: v.village_id), cost

    def generate_name_roster(self, count: int = 40) -> Tuple[List[str], List[str], float]:
        """
        Generates personal names. Returns (first_names, last_names, cost), both deduplicated.
        """
        prompt = f"""
        Generate {count} common Indian personal names.
        OUTPUT: JSON Array.
        RULES:
        - Mix of genders and regions.
        - "first_name" and "last_name" must each be a single word.
        FIELDS: first_name, last_name.
        """
        logger.info(f"Requesting {count} names...")
        entries, cost = self._fetch_big_batch(prompt, NameEntry)

        first_names = list(dict.fromkeys(e.first_name.strip().title() for e in entries))
        last_names = list(dict.fromkeys(e.last_name.strip().title() for e in entries))
        logger.info(f"✅ Roster: {len(first_names)} first names, {len(last_names)} family names")
        return first_names, last_names, cost
