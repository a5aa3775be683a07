"""Data models for the scraper."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ImageGeometry:
    width: int
    height: int


@dataclass
class PipelineResult:
    output_path: Path
    page_count: int
    geometry: ImageGeometry
