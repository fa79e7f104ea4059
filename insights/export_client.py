"""
Benchmark export provider
─────────────────────────────────────────────────────────────────────────────
Loads assessment exports from the assessment service or from disk.

  GET {endpoint}/assessments/{id}/export.csv
      row 1: header, row 2: standard codes, rows 3+: students
  GET {endpoint}/assessments/{id}/periods
      {"<student id>": "<period label>", ...}   (optional, 404 allowed)
  GET {endpoint}/assessments/{id}/metadata
      {"item_descriptions": {...}, "item_difficulties": {...},
       "reporting_categories": {...}, "scaled_scores": {...}}   (optional, 404 allowed)

Auth: Bearer token or Basic Auth

"""

from __future__ import annotations

import io
import logging
import os
import random
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
import requests
import yaml
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from insights.dataset import Dataset
from insights.errors import DatasetLoadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


def parse_export(text: str, assessment_id: str = "", period_assignment: Optional[Dict] = None) -> Dataset:
    """Split a CSV export into header, standard row and student rows."""
    try:
        frame = pd.read_csv(io.StringIO(text), header=None, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetLoadError(assessment_id, f"unreadable CSV ({e})")
    if len(frame) < 2:
        raise DatasetLoadError(assessment_id, "export needs a header row and a standard row")
    rows = frame.values.tolist()
    return Dataset.from_rows(
        header=rows[0],
        standard_row=rows[1],
        rows=rows[2:],
        period_assignment=period_assignment,
        assessment_id=assessment_id,
    )


def load_dataset_file(path: Union[str, Path], period_assignment: Optional[Dict] = None) -> Dataset:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise DatasetLoadError(path.stem, str(e))
    logger.info(f"Loaded export file {path}")
    return parse_export(text, assessment_id=path.stem, period_assignment=period_assignment)


def parse_metadata(text: str, assessment_id: str = "") -> Dict:
    """Standard metadata from a YAML or JSON document (JSON is valid YAML)."""
    try:
        body = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise DatasetLoadError(assessment_id, f"unreadable standard metadata ({e})")
    if not isinstance(body, dict):
        raise DatasetLoadError(assessment_id, "standard metadata must be a mapping")
    return body


class ExportClient:
    """
    Dataset provider backed by the assessment service.

    """

    def __init__(
        self,
        endpoint: str,
        token: str = "",
        username: str = "",
        password: str = "",
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.token = token or os.getenv("BENCHMARK_API_TOKEN", "")
        self.username = username or os.getenv("BENCHMARK_API_USERNAME", "")
        self.password = password or os.getenv("BENCHMARK_API_PASSWORD", "")
        self.timeout = timeout

        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        if self.token:
            self.session.headers["Authorization"] = f"Bearer {self.token}"
        elif self.username:
            self.session.auth = (self.username, self.password)

    def _url(self, assessment_id: str, resource: str) -> str:
        return f"{self.endpoint}/assessments/{assessment_id}/{resource}"

    def fetch_export(self, assessment_id: str) -> str:
        url = self._url(assessment_id, "export.csv")
        logger.info(f"Fetching export: {url}")
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Export request failed: {e}")
            raise DatasetLoadError(assessment_id, str(e)) from e
        return resp.text

    def _optional_json(self, assessment_id: str, resource: str, what: str) -> Dict:
        """GET a JSON object that the service may not have; 404 means empty."""
        url = self._url(assessment_id, resource)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            if resp.status_code == 404:
                logger.info(f"No {what} for {assessment_id}")
                return {}
            resp.raise_for_status()
            body = resp.json()
        except requests.exceptions.RequestException as e:
            raise DatasetLoadError(assessment_id, f"{what} lookup failed ({e})") from e
        except ValueError as e:
            raise DatasetLoadError(assessment_id, f"{what} lookup returned invalid JSON ({e})") from e
        if not isinstance(body, dict):
            raise DatasetLoadError(assessment_id, f"{what} lookup must return an object")
        return body

    def fetch_periods(self, assessment_id: str) -> Dict[str, str]:
        body = self._optional_json(assessment_id, "periods", "period assignments")
        return {str(k): str(v) for k, v in body.items()}

    def standard_metadata(self, assessment_id: str) -> Dict:
        return self._optional_json(assessment_id, "metadata", "standard metadata")

    def load_dataset(self, assessment_id: str) -> Dataset:
        text = self.fetch_export(assessment_id)
        periods = self.fetch_periods(assessment_id)
        dataset = parse_export(text, assessment_id=assessment_id, period_assignment=periods)
        logger.info(f"Loaded {assessment_id}: {len(dataset.rows)} students, {len(dataset.header)} columns")
        return dataset

    def ping(self) -> bool:
        try:
            resp = self.session.get(f"{self.endpoint}/health", timeout=10)
            return resp.status_code == 200
        except requests.exceptions.RequestException:
            return False


class MockExportClient(ExportClient):
    """Seeded demo exports for the dashboard and tests."""

    TEACHERS = ["Alvarez", "Brooks", "Chen", "Dawson"]
    PERIODS = ["1", "2", "3", "Unknown"]
    STANDARDS = ["4.2a", "4.2b", "4.3", "4.4a", "4.5", "4.6"]
    CHOICES = ["A", "B", "C", "D"]
    FIRST_NAMES = ["Ava", "Ben", "Cora", "Dev", "Eli", "Fay", "Gus", "Hana", "Ivan", "Jade",
                   "Kai", "Lena", "Milo", "Nia", "Omar", "Pia", "Quin", "Rosa", "Sam", "Tess"]
    LAST_NAMES = ["Adams", "Baker", "Cruz", "Diaz", "Evans", "Ford", "Gray", "Hill", "Iqbal", "Jones"]

    def __init__(self, seed: int = 7, students: int = 60, questions: int = 20):
        self.endpoint = "mock://local"
        self.token = self.username = self.password = ""
        self.timeout = 5
        self.session = None
        self.seed = seed
        self.n_students = students
        self.n_questions = questions

    def ping(self) -> bool:
        return True

    def _rows(self, assessment_id: str) -> List[List[str]]:
        rng = random.Random(f"{self.seed}:{assessment_id}")
        key = [rng.choice(self.CHOICES) for _ in range(self.n_questions)]
        standards = [self.STANDARDS[i % len(self.STANDARDS)] for i in range(self.n_questions)]

        header = ["Student ID", "Student Name", "Teacher", "Percentage"]
        standard_row = ["", "", "", ""]
        for q in range(1, self.n_questions + 1):
            header += [f"Q{q} Answer", f"Q{q} Score"]
            standard_row += [standards[q - 1], standards[q - 1]]

        rows = [header, standard_row]
        for i in range(self.n_students):
            ability = rng.gauss(0.65, 0.18)
            cells = []
            correct = 0
            for q in range(self.n_questions):
                if rng.random() < 0.03:
                    cells += ["", ""]
                    continue
                hit = rng.random() < ability
                correct += hit
                answer = key[q] if hit else rng.choice([c for c in self.CHOICES if c != key[q]])
                cells += [answer, "1" if hit else "0"]
            name = f"{self.LAST_NAMES[i % len(self.LAST_NAMES)]}, {self.FIRST_NAMES[i % len(self.FIRST_NAMES)]}"
            pct = round(correct / self.n_questions * 100)
            rows.append([f"S{1000 + i}", name, self.TEACHERS[i % len(self.TEACHERS)], str(pct)] + cells)
        return rows

    def fetch_export(self, assessment_id: str) -> str:
        buf = io.StringIO()
        pd.DataFrame(self._rows(assessment_id)).to_csv(buf, header=False, index=False)
        return buf.getvalue()

    def fetch_periods(self, assessment_id: str) -> Dict[str, str]:
        rng = random.Random(f"{self.seed}:periods")
        return {f"S{1000 + i}": rng.choice(self.PERIODS) for i in range(self.n_students)}

    def standard_metadata(self, assessment_id: str) -> Dict:
        rng = random.Random(f"{self.seed}:{assessment_id}:meta")
        return {
            "item_descriptions": {q: f"Item {q} on standard {self.STANDARDS[(q - 1) % len(self.STANDARDS)]}"
                                  for q in range(1, self.n_questions + 1)},
            "item_difficulties": {q: rng.choice(["H", "M", "L"]) for q in range(1, self.n_questions + 1)},
            "reporting_categories": {code: ("Number Sense" if code.startswith("4.2") else "Computation")
                                     for code in self.STANDARDS},
            "scaled_scores": {f"S{1000 + i}": rng.randint(300, 600) for i in range(self.n_students)},
        }
