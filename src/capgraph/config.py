"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="CAPGRAPH_",
    )

    # Neighborhood highlighting
    neighborhood_max_hops: int = Field(
        default=10,
        description="Hard cap on BFS depth when the whole connected stack is requested"
    )

    # Radial HEB layout
    radial_tension: float = Field(
        default=0.85,
        description="Bundle beta: 1 follows the hierarchy, 0 draws straight lines"
    )
    radial_margin: float = 80.0  # Space kept for labels outside the tool ring
    radial_min_radius: float = 40.0
    radial_capability_ratio: float = 0.4  # Inner ring radius relative to tool ring
    radial_tool_padding: float = 0.02  # Radians between tool arcs
    radial_server_gap: float = 0.06  # Extra radians between server groups
    radial_capability_padding: float = 0.02

    # Timeline grid
    timeline_card_width: float = 200.0
    timeline_row_height: float = 180.0
    timeline_base_y: float = 80.0
    timeline_margin_x: float = 100.0
    timeline_group_spacing: float = 60.0
    timeline_separator_offset: float = 30.0
    timeline_tool_spacing: float = 35.0
    timeline_tool_offset_x: float = 20.0
    timeline_tool_offset_y: float = 40.0

    # Hull overlays
    hull_padding: float = Field(
        default=20.0,
        description="Distance between cluster members and the drawn hull outline"
    )
    hull_smooth_samples: int = Field(
        default=8,
        description="Spline samples per hull edge for the smooth variant"
    )

    # Search
    search_min_query_length: int = 2
    search_max_results: int = 8


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        neighborhood_max_hops=10,
        radial_tension=0.85,
        search_max_results=8,
    )


# Global settings instance
settings = Settings()
