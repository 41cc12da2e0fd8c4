"""
Outsole scan -> feature centroid mesh.

Modular pipeline split into independent steps:
  1. Border (ruler strip) removal
  2. Binarize & trim
  3. Morphological filter
  4. Region analysis & shape classification
  5. Suspect region removal
  6. Centroid extraction
  7. Mesh construction
  8. Visualization
"""

from solemesh.config import PipelineConfig
from solemesh.errors import (
    PipelineError,
    EmptyRegionAfterThreshold,
    InsufficientPointsForMesh,
    DegenerateStructuringElement,
)
from solemesh.io_utils import (
    Point,
    Region,
    RegionTable,
    Mesh,
    StageFailure,
    FingerprintResult,
    load_image,
    list_images,
    save_points,
    save_mesh,
)
from solemesh.step1_border import remove_border, find_border_bbox
from solemesh.step2_binarize import binarize_and_trim
from solemesh.step3_morphology import clean, disk_footprint
from solemesh.step4_regions import analyze, FillRatioClassifier
from solemesh.step5_erase import erase, keep_features
from solemesh.step6_centroids import centroids
from solemesh.step7_mesh import triangulate
from solemesh.process import process_image
