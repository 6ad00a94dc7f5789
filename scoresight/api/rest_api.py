"""
REST API for the Scoresight engine using FastAPI.

The API is stateless: every request carries the students and subjects it
computes over, already filtered by the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..config import AnalyticsConfig
from ..core.entities import ScoreEntry, Student, Subject, SubTopic
from ..core.exceptions import InvalidInputError
from ..services import AnalyticsService
from ..services.comparison import radar_series
from ..services.gap_analysis import SubTopicGap
from ..services.ranking import RankedStudent
from ..services.scoring import ScoreResult, score_for_subject
from ..services.statistics import CohortStatistics, cohort_stats

logger = logging.getLogger(__name__)


# Pydantic models for API
class SubTopicIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    max_score: float


class SubjectIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    code: str = Field(..., min_length=1, max_length=20)
    sub_topics: List[SubTopicIn] = []


class ScoreEntryIn(BaseModel):
    sub_topic_id: str = Field(..., min_length=1)
    score: float


class StudentIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    class_id: str = ""
    scores: List[ScoreEntryIn] = []


class SubjectScoreRequest(BaseModel):
    student: StudentIn
    subject: SubjectIn


class TotalScoreRequest(BaseModel):
    student: StudentIn
    subjects: List[SubjectIn] = []


class CohortRequest(BaseModel):
    students: List[StudentIn] = []
    subjects: List[SubjectIn] = []


class CohortStatsRequest(BaseModel):
    percentages: List[float] = []


class BoxPlotRequest(CohortRequest):
    subject_id: Optional[str] = None


class RankRequest(CohortRequest):
    student_id: str = Field(..., min_length=1)


class TopRequest(CohortRequest):
    fraction: Optional[float] = Field(None, ge=0, le=1)


class BottomRequest(CohortRequest):
    fraction: Optional[float] = Field(None, ge=0, le=1)
    threshold: Optional[float] = Field(None, ge=0, le=100)


class AssessmentIn(BaseModel):
    label: str = Field(..., min_length=1)
    students: List[StudentIn] = []


class TrendRequest(BaseModel):
    assessments: List[AssessmentIn] = []
    subjects: List[SubjectIn] = []
    subject_id: Optional[str] = None
    sub_topic_id: Optional[str] = None
    student_id: Optional[str] = None


class RadarRequest(BaseModel):
    series_a: Dict[str, float] = {}
    series_b: Dict[str, float] = {}


class ScoreResponse(BaseModel):
    score: float
    max_score: float
    percentage: float


class QuartilesResponse(BaseModel):
    q1: float
    median: float
    q3: float


class CohortStatsResponse(BaseModel):
    mean: float
    stddev: float
    quartiles: QuartilesResponse
    min: float
    max: float
    outliers: List[float] = []
    count: int


class RankResponse(BaseModel):
    rank: int
    percentile: float
    cohort_size: int


class RankedStudentResponse(BaseModel):
    student_id: str
    student_name: str
    class_id: str
    rank: int
    percentage: float


class BottomResponse(BaseModel):
    students: List[RankedStudentResponse]
    needing_attention: int


class GapResponse(BaseModel):
    sub_topic_id: str
    name: str
    subject_code: str
    subject_name: str
    max_score: float
    average_percentage: float
    highest_percentage: float
    lowest_percentage: float
    priority: str


class RadarPointResponse(BaseModel):
    subject_code: str
    series_a: float
    series_b: float


class TrendPointResponse(BaseModel):
    label: str
    average: float
    highest: float
    lowest: float
    count: int
    student_percentage: Optional[float] = None


class ClassStatisticsResponse(BaseModel):
    total_students: int
    average: float
    highest: float
    lowest: float
    stddev: float


class DashboardResponse(BaseModel):
    statistics: ClassStatisticsResponse
    top_students: List[RankedStudentResponse]
    bottom_students: List[RankedStudentResponse]
    needing_attention: int
    subject_averages: Dict[str, float]
    weakest_topics: List[GapResponse]


def to_subject(data: SubjectIn) -> Subject:
    return Subject(
        id=data.id,
        name=data.name,
        code=data.code,
        sub_topics=tuple(SubTopic(st.id, st.name, st.max_score) for st in data.sub_topics),
    )


def to_student(data: StudentIn) -> Student:
    return Student(
        id=data.id,
        name=data.name,
        class_id=data.class_id,
        scores=tuple(ScoreEntry(entry.sub_topic_id, entry.score) for entry in data.scores),
    )


class ScoresightRestAPI:
    """REST API implementation for the Scoresight engine."""

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self._config = config or AnalyticsConfig()

        # Create FastAPI app
        self.app = FastAPI(
            title="Scoresight Analytics API",
            description="Score aggregation and ranking engine for exam dashboards",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        # Add CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Setup routes
        self._setup_routes()

    def _service(self, subjects: Sequence[SubjectIn]) -> AnalyticsService:
        return AnalyticsService([to_subject(subject) for subject in subjects], self._config)

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "Scoresight Analytics API",
                "version": __version__,
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Score endpoints
        @self.app.post("/scores/subject", response_model=ScoreResponse)
        async def subject_score(request: SubjectScoreRequest):
            """Score of one student in one subject."""
            try:
                result = score_for_subject(to_student(request.student), to_subject(request.subject))
                return self._score_to_response(result)

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Subject score failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.post("/scores/total", response_model=ScoreResponse)
        async def total_score(request: TotalScoreRequest):
            """Total score of one student over the given subjects."""
            try:
                service = self._service(request.subjects)
                result = service.total_score(to_student(request.student))
                return self._score_to_response(result)

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Total score failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        # Statistics endpoints
        @self.app.post("/statistics/cohort", response_model=CohortStatsResponse)
        async def cohort_statistics(request: CohortStatsRequest):
            """Mean, stddev, quartiles and whiskers of a list of percentages."""
            try:
                stats = cohort_stats(request.percentages, self._config.outlier_iqr_multiplier)
                return self._stats_to_response(stats)

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Cohort statistics failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.post("/statistics/box-plot", response_model=CohortStatsResponse)
        async def box_plot(request: BoxPlotRequest):
            """Box plot of total percentages, or of one subject's percentages."""
            try:
                service = self._service(request.subjects)
                subject = None
                if request.subject_id is not None:
                    subject = service.get_subject(request.subject_id)
                    if subject is None:
                        raise HTTPException(status_code=404, detail="Subject not found")

                students = [to_student(student) for student in request.students]
                return self._stats_to_response(service.box_plot(students, subject))

            except HTTPException:
                raise
            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Box plot failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        # Ranking endpoints
        @self.app.post("/ranking/rank", response_model=RankResponse)
        async def student_rank(request: RankRequest):
            """Rank and percentile of one student within the cohort."""
            try:
                service = self._service(request.subjects)
                students = [to_student(student) for student in request.students]
                target = next((student for student in students if student.id == request.student_id), None)
                if target is None:
                    raise InvalidInputError(f"Student {request.student_id!r} is not a member of the cohort")

                result = service.rank(target, students)
                return RankResponse(rank=result.rank, percentile=result.percentile, cohort_size=result.cohort_size)

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Rank failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.post("/ranking/top", response_model=List[RankedStudentResponse])
        async def top_students(request: TopRequest):
            """Top fraction of the cohort, best first."""
            try:
                service = self._service(request.subjects)
                students = [to_student(student) for student in request.students]
                return [self._ranked_to_response(entry) for entry in service.top_students(students, request.fraction)]

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Top students failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.post("/ranking/bottom", response_model=BottomResponse)
        async def bottom_students(request: BottomRequest):
            """Bottom fraction of the cohort, weakest first, with the needing-attention count."""
            try:
                service = self._service(request.subjects)
                students = [to_student(student) for student in request.students]
                bottom = service.bottom_students(students, request.fraction)
                attention = service.needing_attention(students, request.fraction, request.threshold)
                return BottomResponse(
                    students=[self._ranked_to_response(entry) for entry in bottom],
                    needing_attention=attention,
                )

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Bottom students failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        # Gap analysis endpoints
        @self.app.post("/gaps", response_model=List[GapResponse])
        async def gaps(request: CohortRequest):
            """Sub-topic gaps of the cohort, weakest first."""
            try:
                service = self._service(request.subjects)
                students = [to_student(student) for student in request.students]
                return [self._gap_to_response(gap) for gap in service.gap_report(students)]

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Gap report failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        # Comparison endpoints
        @self.app.post("/comparison/radar", response_model=List[RadarPointResponse])
        async def radar(request: RadarRequest):
            """Merge two per-subject percentage maps for a radar chart."""
            return [
                RadarPointResponse(subject_code=point.subject_code, series_a=point.series_a, series_b=point.series_b)
                for point in radar_series(request.series_a, request.series_b)
            ]

        # Trend endpoints
        @self.app.post("/trends", response_model=List[TrendPointResponse])
        async def trends(request: TrendRequest):
            """Cohort percentages per assessment, for the total, one subject or one sub-topic."""
            try:
                service = self._service(request.subjects)
                subject = None
                if request.subject_id is not None:
                    subject = service.get_subject(request.subject_id)
                    if subject is None:
                        raise HTTPException(status_code=404, detail="Subject not found")
                sub_topic = None
                if request.sub_topic_id is not None:
                    sub_topic = service.get_sub_topic(request.sub_topic_id)
                    if sub_topic is None:
                        raise HTTPException(status_code=404, detail="Sub-topic not found")

                labelled_cohorts = [
                    (assessment.label, [to_student(student) for student in assessment.students])
                    for assessment in request.assessments
                ]
                points = service.trend(labelled_cohorts, subject, sub_topic, request.student_id)
                return [
                    TrendPointResponse(
                        label=point.label,
                        average=point.average,
                        highest=point.highest,
                        lowest=point.lowest,
                        count=point.count,
                        student_percentage=point.student_percentage,
                    )
                    for point in points
                ]

            except HTTPException:
                raise
            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Trend failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        # Dashboard endpoints
        @self.app.post("/dashboard/summary", response_model=DashboardResponse)
        async def dashboard_summary(request: CohortRequest):
            """Headline numbers for a dashboard."""
            try:
                service = self._service(request.subjects)
                students = [to_student(student) for student in request.students]
                summary = service.dashboard_summary(students)
                return DashboardResponse(
                    statistics=ClassStatisticsResponse(
                        total_students=summary.statistics.total_students,
                        average=summary.statistics.average,
                        highest=summary.statistics.highest,
                        lowest=summary.statistics.lowest,
                        stddev=summary.statistics.stddev,
                    ),
                    top_students=[self._ranked_to_response(entry) for entry in summary.top_students],
                    bottom_students=[self._ranked_to_response(entry) for entry in summary.bottom_students],
                    needing_attention=summary.needing_attention,
                    subject_averages=summary.subject_averages,
                    weakest_topics=[self._gap_to_response(gap) for gap in summary.weakest_topics],
                )

            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except Exception as e:
                logger.exception("Dashboard summary failed")
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

    def _score_to_response(self, result: ScoreResult) -> ScoreResponse:
        """Convert a ScoreResult to response model."""
        return ScoreResponse(score=result.score, max_score=result.max_score, percentage=result.percentage)

    def _stats_to_response(self, stats: CohortStatistics) -> CohortStatsResponse:
        """Convert CohortStatistics to response model."""
        return CohortStatsResponse(
            mean=stats.mean,
            stddev=stats.stddev,
            quartiles=QuartilesResponse(q1=stats.quartiles.q1, median=stats.quartiles.median, q3=stats.quartiles.q3),
            min=stats.min,
            max=stats.max,
            outliers=list(stats.outliers),
            count=stats.count,
        )

    def _ranked_to_response(self, entry: RankedStudent) -> RankedStudentResponse:
        """Convert a RankedStudent to response model."""
        return RankedStudentResponse(
            student_id=entry.student.id,
            student_name=entry.student.name,
            class_id=entry.student.class_id,
            rank=entry.rank,
            percentage=entry.percentage,
        )

    def _gap_to_response(self, gap: SubTopicGap) -> GapResponse:
        """Convert a SubTopicGap to response model."""
        return GapResponse(
            sub_topic_id=gap.sub_topic_id,
            name=gap.name,
            subject_code=gap.subject_code,
            subject_name=gap.subject_name,
            max_score=gap.max_score,
            average_percentage=gap.average_percentage,
            highest_percentage=gap.highest_percentage,
            lowest_percentage=gap.lowest_percentage,
            priority=gap.priority.value,
        )
