"""
AI analysis result model

One row per stored LLM analysis (intelligence reports, mobility plans, ...)
"""
from enum import Enum
from typing import Optional, Dict, Any
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class AnalysisType(str, Enum):
    JD_OPTIMIZATION = "jd_optimization"
    MARKET_ALIGNMENT = "market_alignment"
    SKILLS_MAPPING = "skills_mapping"
    COMPLIANCE_ANALYSIS = "compliance_analysis"
    MOBILITY_PLAN = "mobility_plan"
    DEVELOPMENT_PATHWAY = "development_pathway"
    ROLE_STANDARDIZATION = "role_standardization"
    # succession planning
    LEADERSHIP_PIPELINE = "leadership_pipeline"
    SUCCESSION_READINESS = "succession_readiness"
    HIGH_POTENTIAL_IDENTIFICATION = "high_potential_identification"
    LEADERSHIP_GAP_ANALYSIS = "leadership_gap_analysis"
    # diversity and inclusion
    BIAS_DETECTION = "bias_detection"
    DIVERSITY_METRICS = "diversity_metrics"
    INCLUSION_SENTIMENT = "inclusion_sentiment"
    PAY_EQUITY_ANALYSIS = "pay_equity_analysis"
    # role intelligence
    ROLE_EVOLUTION = "role_evolution"
    REDUNDANCY_ANALYSIS = "redundancy_analysis"
    FUTURE_PREDICTION = "future_prediction"
    COMPETITIVENESS_SCORING = "competitiveness_scoring"
    # learning and development
    PERSONALIZED_LEARNING = "personalized_learning"
    SKILLS_DEVELOPMENT = "skills_development"
    TRAINING_EFFECTIVENESS = "training_effectiveness"
    LEARNING_STRATEGY = "learning_strategy"


class AnalysisStatus(str, Enum):
    COMPLETED = "completed"
    FALLBACK = "fallback"
    FAILED = "failed"


class AnalysisResult(TimestampMixin, IDMixin, table=True):
    """Stored AI analysis"""
    __tablename__ = "ai_analysis_results"

    analysis_type: str = Field(..., max_length=50, index=True)
    function_name: str = Field(..., max_length=100)
    input_parameters: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    analysis_result: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    status: str = Field(default=AnalysisStatus.COMPLETED.value, max_length=20)
    employee_id: Optional[str] = Field(default=None, foreign_key="employees.id", index=True)
    created_by: Optional[str] = None


class AnalysisResultResponse(TimestampResponse):
    analysis_type: str
    function_name: str
    input_parameters: Dict[str, Any]
    analysis_result: Dict[str, Any]
    status: str
    employee_id: Optional[str]
    created_by: Optional[str]


class JDIntelligenceRequest(SQLModelBase):
    """Portfolio analysis of stored job descriptions"""
    analysis_type: str = Field(..., description="jd_optimization | market_alignment | skills_mapping | compliance_analysis")
    department_filter: Optional[str] = None
    role_filter: Optional[str] = None


class WorkforceAnalysisRequest(SQLModelBase):
    """
    Organization-wide analysis request

    Shared by succession planning, diversity and inclusion, role
    intelligence and learning and development. Each narrows its context
    with the fields that apply to it.
    """
    analysis_type: str = Field(..., max_length=50)
    department_filter: Optional[str] = None
    position_level: Optional[str] = Field(None, description="Succession planning: leadership level to focus on")
    metric_type: Optional[str] = Field(None, description="Diversity and inclusion: metric to focus on")
    time_horizon: Optional[str] = Field(None, description="Role intelligence: e.g. '2 years'")
    employee_id: Optional[str] = Field(None, description="Learning and development: employee to focus on")
