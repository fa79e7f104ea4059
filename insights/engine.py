"""
Benchmark Analytics Engine
Turns one resolved assessment export into the full report bundle.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from insights.dataset import Dataset, StudentRecord, build_students, by_teacher
from insights.formats import build_format_sections
from insights.grouping import groups_for_students
from insights.heatmap import build_heatmaps
from insights.item_analysis import analyze_items_by_teacher
from insights.schema import AssessmentSchema, resolve_schema
from insights.settings import ReportOptions, Settings
from insights.summary import summarize_district, summarize_teachers

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """
    Computes every report for a dataset.

    The schema is resolved once per call; each section then reads the same
    normalized student list. `analyze` either returns a complete bundle or
    raises a ConfigurationError, never a partial bundle.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def resolve(self, dataset: Dataset):
        schema = resolve_schema(dataset.header, dataset.standard_row)
        students = build_students(dataset, schema)
        return schema, students

    def analyze(
        self,
        dataset: Dataset,
        options: Optional[ReportOptions] = None,
        data_format: Optional[str] = None,
        standard_metadata: Optional[Mapping] = None,
    ) -> Dict:
        options = options or ReportOptions()
        schema, students = self.resolve(dataset)
        logger.info(f"Analyzing {dataset.assessment_id or 'assessment'}: "
                    f"{len(students)} students, {len(schema.questions)} questions")

        bundle: Dict = {
            "assessment_id": dataset.assessment_id,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "settings": self.settings.to_dict(),
            "standards": list(schema.standards),
        }
        bundle.update(self.compute_sections(schema, students, options, data_format, standard_metadata))
        return bundle

    def compute_sections(
        self,
        schema: AssessmentSchema,
        students: List[StudentRecord],
        options: ReportOptions,
        data_format: Optional[str] = None,
        standard_metadata: Optional[Mapping] = None,
    ) -> Dict:
        """All timestamp-free sections; identical inputs give identical output."""
        questions = schema.questions
        standards = schema.standards
        grouped = by_teacher(students)

        sections: Dict = {
            "teacher_summaries": summarize_teachers(grouped, questions, standards, self.settings),
        }
        if options.district:
            sections["district_summary"] = summarize_district(
                sections["teacher_summaries"], students, questions, standards, self.settings
            )
        if options.item_analysis:
            sections["item_analysis"] = analyze_items_by_teacher(grouped, questions)
        if options.groups:
            sections["groups"] = groups_for_students(students, questions, standards, self.settings)
        if options.heatmaps:
            sections["heatmaps"] = build_heatmaps(students, questions, standards)
        if options.format_sections:
            report = build_format_sections(data_format, students, questions, standards, standard_metadata)
            if report is not None:
                sections["format_sections"] = report
        return sections
