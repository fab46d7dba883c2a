"""Configuration settings for the Landlord Auditor application."""

import os
import streamlit as st
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def get_secret_or_env(key: str, default: str = None) -> str:
    """Get value from Streamlit secrets or environment variables."""
    try:
        # Try to get from Streamlit secrets first
        if hasattr(st, 'secrets') and st.secrets:
            return st.secrets.get(key, os.getenv(key, default))
        else:
            return os.getenv(key, default)
    except Exception:
        # st.secrets raises when no secrets.toml exists
        return os.getenv(key, default)


class ScoringConfig:
    """Fixed thresholds and labels used by scoring and report assembly.

    Aggregate scores (category, subcategory, overall) are banded on the
    0-10 scale with the 4.0 / 7.5 cut points. Individual answers are banded
    on the raw 1-10 option scale with the 3 / 6 cut points.
    """

    def __init__(self,
                 green_threshold: float = 7.5,
                 orange_threshold: float = 4.0,
                 question_red_max: int = 3,
                 question_orange_max: int = 6,
                 critical_fail_max: int = 3,
                 max_score: float = 10.0,
                 accepted_answer_values: Optional[List[int]] = None,
                 report_id_prefix: str = 'LRA'):
        self.green_threshold = green_threshold
        self.orange_threshold = orange_threshold
        self.question_red_max = question_red_max
        self.question_orange_max = question_orange_max
        self.critical_fail_max = critical_fail_max
        self.max_score = max_score
        self.accepted_answer_values = list(accepted_answer_values or [1, 5, 10])
        self.report_id_prefix = report_id_prefix

        self.risk_levels = {
            'red': 'high',
            'orange': 'medium',
            'green': 'low',
        }
        self.tier_labels = {
            'red': 'High Risk',
            'orange': 'Medium Risk',
            'green': 'Low Risk',
        }
        # Guidance level used for a band
        self.score_levels = {
            'red': 'low',
            'orange': 'medium',
            'green': 'high',
        }
        self.impact_labels = ['Legal Exposure', 'Tribunal Risk', 'Best Practice']
        self.audit_tier_labels = {
            'tier_0': 'Tier 0 - Essentials',
            'tier_1': 'Tier 1 - Standard',
            'tier_2': 'Tier 2 - Enhanced',
            'tier_3': 'Tier 3 - Comprehensive',
            'tier_4': 'Tier 4 - Portfolio',
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'green_threshold': self.green_threshold,
            'orange_threshold': self.orange_threshold,
            'question_red_max': self.question_red_max,
            'question_orange_max': self.question_orange_max,
            'critical_fail_max': self.critical_fail_max,
            'max_score': self.max_score,
            'accepted_answer_values': list(self.accepted_answer_values),
            'report_id_prefix': self.report_id_prefix,
        }


DEFAULT_SCORING_CONFIG = ScoringConfig()


def get_app_settings() -> Dict[str, Any]:
    """Get deployment settings for the app and report boundary."""
    return {
        'catalog_path': get_secret_or_env('QUESTION_CATALOG_PATH'),
        'audit_store_path': get_secret_or_env('AUDIT_STORE_PATH', '.data/audits.json'),
        'report_output_dir': get_secret_or_env('REPORT_OUTPUT_DIR', 'reports'),
        'brand_name': get_secret_or_env('REPORT_BRAND_NAME', 'Landlord Safeguarding'),
        'report_author': get_secret_or_env('REPORT_AUTHOR', 'Landlord Safeguarding Audit System'),
    }
