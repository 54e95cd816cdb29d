"""
PubTator Editor Central Configuration
Contains segmentation limits, seed vocabulary, export defaults and logging settings
"""

from dataclasses import dataclass, field
from typing import List, Optional
import os

import yaml


DEFAULT_ENTITY_TYPES = ["Chemical", "Gene", "Disease", "Species", "Mutation", "CellLine"]


@dataclass
class SegmentationConfig:
    """Configuration for the highlight segmentation passes"""

    # Potential match candidates (annotation texts re-found elsewhere)
    potential_min_length: int = 1
    potential_max_length: int = 50

    # Snap tolerance used when mapping a segment back to its annotation
    reconcile_tolerance: int = 5

    # Upper bound on user supplied search patterns
    max_pattern_length: int = 500

    # How far from its old offset an annotation may move when text is edited
    reanchor_window: int = 50


@dataclass
class EditorConfig:
    """Main configuration class combining all settings"""

    segmentation: SegmentationConfig
    seed_entity_types: List[str] = field(default_factory=lambda: list(DEFAULT_ENTITY_TYPES))

    # Export
    default_filename: str = "pubtator_annotations.txt"
    fallback_dir: str = "./downloads"

    # Logging
    log_level: str = "INFO"

    def __init__(self,
                 segmentation: Optional[SegmentationConfig] = None,
                 seed_entity_types: Optional[List[str]] = None):
        """Initialize with optional custom configurations"""
        self.segmentation = segmentation or SegmentationConfig()
        self.seed_entity_types = list(seed_entity_types or DEFAULT_ENTITY_TYPES)
        self.default_filename = "pubtator_annotations.txt"
        self.fallback_dir = "./downloads"
        self.log_level = "INFO"

        # Override with environment variables if present
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration overrides from environment variables"""
        if os.getenv("PUBTATOR_DEFAULT_FILENAME"):
            self.default_filename = os.getenv("PUBTATOR_DEFAULT_FILENAME")

        if os.getenv("PUBTATOR_FALLBACK_DIR"):
            self.fallback_dir = os.getenv("PUBTATOR_FALLBACK_DIR")

        if os.getenv("PUBTATOR_MAX_PATTERN_LENGTH"):
            try:
                self.segmentation.max_pattern_length = int(os.getenv("PUBTATOR_MAX_PATTERN_LENGTH"))
            except ValueError:
                raise ValueError(
                    f"PUBTATOR_MAX_PATTERN_LENGTH must be an integer, got {os.getenv('PUBTATOR_MAX_PATTERN_LENGTH')!r}"
                )

        # Debug override
        if os.getenv("PUBTATOR_DEBUG", "").lower() in ("true", "1", "yes"):
            self.log_level = "DEBUG"

    @classmethod
    def load_from_file(cls, config_path: str) -> 'EditorConfig':
        """Load configuration from YAML file"""
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            segmentation = SegmentationConfig(**config_data.get('segmentation', {}))
            config = cls(segmentation=segmentation,
                         seed_entity_types=config_data.get('seed_entity_types'))

            # Override other settings
            for key, value in config_data.items():
                if key not in ['segmentation', 'seed_entity_types'] and hasattr(config, key):
                    setattr(config, key, value)

            return config

        except (OSError, TypeError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        config_data = {
            'segmentation': {
                'potential_min_length': self.segmentation.potential_min_length,
                'potential_max_length': self.segmentation.potential_max_length,
                'reconcile_tolerance': self.segmentation.reconcile_tolerance,
                'max_pattern_length': self.segmentation.max_pattern_length,
                'reanchor_window': self.segmentation.reanchor_window
            },
            'seed_entity_types': list(self.seed_entity_types),
            'default_filename': self.default_filename,
            'fallback_dir': self.fallback_dir,
            'log_level': self.log_level
        }

        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)


# Default global configuration instance
default_config = EditorConfig()
