from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator
from typing import Optional, List, Any, Literal
from datetime import datetime, timezone
from enum import Enum


class SourceType(str, Enum):
    """How close a source sits to the original information"""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


class PoliticalLean(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class EdgeType(str, Enum):
    """Relationship between two sources (or article -> claim -> source)"""
    CITES = "cites"
    DERIVES_FROM = "derives_from"
    REPUBLISHES = "republishes"
    CONTRADICTS = "contradicts"


class NodeKind(str, Enum):
    ARTICLE = "article"
    CLAIM = "claim"
    SOURCE = "source"


def _lower_or_none(value: Any) -> Any:
    """Providers are inconsistent about casing and send "" for absent enums."""
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value


class Claim(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    text: str = Field(alias="claim_text")
    confidence: float = Field(ge=0, le=1)
    explanation: Optional[str] = Field(default=None, alias="confidence_explanation")
    position: int = Field(ge=1)
    chain_raw: Optional[str] = Field(default=None, alias="source_chain")


class Source(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    outlet_name: str
    url: str
    url_valid: Optional[bool] = None  # set by the URL verifier only
    publish_date: Optional[str] = None
    political_lean: Optional[PoliticalLean] = None
    source_type: SourceType
    category: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def null_url_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("political_lean", mode="before")
    @classmethod
    def normalize_lean(cls, v):
        return _lower_or_none(v)

    @field_validator("source_type", mode="before")
    @classmethod
    def normalize_source_type(cls, v):
        return _lower_or_none(v)


class _Positioned(BaseModel):
    """Remembers where an item sat in the provider's list, across remap drops."""
    _raw_index: Optional[int] = PrivateAttr(default=None)

    @property
    def raw_index(self) -> Optional[int]:
        return self._raw_index


class Citation(_Positioned):
    model_config = ConfigDict(extra="allow", frozen=True)

    claim_index: int
    source_index: int
    excerpt: str
    rationale: Optional[str] = None
    page_number: Optional[str] = None

    @field_validator("page_number", mode="before")
    @classmethod
    def page_number_as_text(cls, v):
        # "p. 4" and 4 both show up in the wild
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class Edge(_Positioned):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    source_index: int
    target_index: int
    type: EdgeType = Field(alias="edge_type")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return _lower_or_none(v)


class PoliticalDistribution(BaseModel):
    left: int = Field(ge=0)
    center: int = Field(ge=0)
    right: int = Field(ge=0)


class Metrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    factual_accuracy: float = Field(ge=0, le=100)
    factual_accuracy_explanation: Optional[str] = None
    clickbait_level: float = Field(ge=0, le=100)
    clickbait_explanation: Optional[str] = None
    bias_level: float = Field(ge=0, le=100)
    bias_explanation: Optional[str] = None
    transparency_score: float = Field(ge=0, le=1)
    transparency_explanation: Optional[str] = None
    confidence_score: float = Field(ge=0, le=1)
    confidence_explanation: Optional[str] = None
    spectrum_coverage: str
    political_distribution: Optional[PoliticalDistribution] = None


class ExtractionMetadata(BaseModel):
    content_extracted: bool = False
    original_url: Optional[str] = None
    extraction_timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class AnalysisPayload(BaseModel):
    """Validated provider output. Unknown top-level keys are kept as extras."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    topic: str
    headline: str
    summary: Optional[str] = None
    claims: List[Claim]
    sources: List[Source]
    citations: List[Citation] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    metrics: Metrics

    @model_validator(mode="after")
    def record_raw_positions(self):
        for items in (self.citations, self.edges):
            for i, item in enumerate(items):
                if item._raw_index is None:
                    item._raw_index = i
        return self


class ChainLink(BaseModel):
    """One hop of a claim's "how we know this" trail"""
    model_config = ConfigDict(frozen=True)

    name: str
    type: SourceType
    url: Optional[str] = None


class GraphNode(BaseModel):
    id: str
    name: str
    kind: NodeKind
    political_lean: Optional[PoliticalLean] = None
    source_type: Optional[SourceType] = None


class GraphEdge(BaseModel):
    source_id: str
    target_id: str
    type: EdgeType


class ProvenanceGraph(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def edge_ids(self) -> List[str]:
        return [f"{e.source_id}->{e.target_id}:{e.type.value}" for e in self.edges]


class IntegrityWarning(BaseModel):
    """A citation or edge dropped because it could not be resolved"""
    kind: Literal["citation", "edge"]
    index: int  # position in the list that was being checked
    reason: str


class AnalysisResult(AnalysisPayload):
    chain_links: List[List[ChainLink]] = Field(default_factory=list)
    graph: ProvenanceGraph = Field(default_factory=ProvenanceGraph)
    warnings: List[IntegrityWarning] = Field(default_factory=list)
    extraction_metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)

    def to_response(self) -> dict:
        """JSON-ready dict using the provider's wire names (claim_text, edge_type, ...)."""
        return self.model_dump(mode="json", by_alias=True)
