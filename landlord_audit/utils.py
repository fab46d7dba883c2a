"""Utility functions for Landlord Auditor."""

import re
import json
import logging
from datetime import datetime
from typing import Dict, Any
from pathlib import Path

logger = logging.getLogger(__name__)


def load_json_file(file_path: str) -> Dict[str, Any]:
    """Load and return JSON file contents."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Error loading {file_path}: {e}")
        return {}


def save_json_file(data: Dict[str, Any], file_path: str) -> bool:
    """Save data to JSON file."""
    try:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        return True
    except (OSError, TypeError) as e:
        logger.error(f"Error saving {file_path}: {e}")
        return False


def truncate_text(text: str, max_length: int = 300) -> str:
    """Truncate text to specified length, preserving word boundaries."""
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(' ')

    if last_space > max_length * 0.8:  # If we can find a good break point
        return truncated[:last_space] + "..."

    return truncated + "..."


def slugify_address(address: str, max_length: int = 80) -> str:
    """Turn a property address into a filename-safe slug.

    "12 High St., Flat 3" -> "12-high-st-flat-3"
    """
    slug = re.sub(r'[^a-z0-9]+', '-', (address or '').lower()).strip('-')
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip('-')
    return slug


def format_report_date(value: datetime) -> str:
    """Format a date for display in the report, e.g. "14 March 2026"."""
    return f"{value.day} {value.strftime('%B %Y')}"


def get_color_hex(color: str) -> str:
    """Get hex value for a traffic-light colour."""
    colors = {
        'red': '#d32f2f',
        'orange': '#f57c00',
        'green': '#388e3c',
    }
    return colors.get(color, '#666666')


def get_color_icon(color: str) -> str:
    """Get icon for a traffic-light colour."""
    icons = {
        'red': '🔴',
        'orange': '🟠',
        'green': '🟢',
    }
    return icons.get(color, '⚪')


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format."""
    if size_bytes == 0:
        return "0B"

    size_names = ["B", "KB", "MB", "GB"]
    i = 0
    while size_bytes >= 1024 and i < len(size_names) - 1:
        size_bytes /= 1024.0
        i += 1

    return f"{size_bytes:.1f}{size_names[i]}"


def get_app_version() -> str:
    """Get application version."""
    return "1.0.0"


def get_assets_path() -> Path:
    """Get path to assets directory."""
    return Path(__file__).parent / "assets"


def get_templates_path() -> Path:
    """Get path to templates directory."""
    return Path(__file__).parent / "templates"
