import contextlib
import time
from typing import Dict, List
from dataclasses import dataclass

import numpy as np

"""
Timing log for conversion phases.

Each scenario (usually one input file) records named events with start and end
times in milliseconds. Logs are written as CSV lines:

    scenario,start_ms,end_ms,duration_ms,event
"""


class Duration(contextlib.AbstractContextManager):
    def __init__(self, scenario: 'ScenarioLog', event_name: str):
        self.scenario = scenario
        self.event_name = event_name
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter() * 1000
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        end_time = time.perf_counter() * 1000
        self.scenario.log(self.event_name, self.start_time, end_time)


@dataclass
class Event:
    name: str
    start_time_ms: float
    end_time_ms: float

    @property
    def duration_ms(self) -> float:
        return self.end_time_ms - self.start_time_ms


class ScenarioLog:
    def __init__(self, name):
        if isinstance(name, list):
            self.name = "::".join(name)
        else:
            self.name = name
        self.events = []

    def log(self, event_name: str, start_time_ms: float, end_time_ms: float):
        self.events.append(Event(event_name, start_time_ms, end_time_ms))

    def event(self, name: str) -> Duration:
        return Duration(self, name)

    def name_as_tuple(self):
        return tuple(self.name.split("::"))

    def total_ms(self) -> float:
        return sum(e.duration_ms for e in self.events)

    def write(self, fp):
        for event in self.events:
            fp.write(f"{self.name},{event.start_time_ms},{event.end_time_ms},{event.duration_ms},{event.name}\n")


class PerformanceLog:
    def __init__(self):
        self.scenarios: List[ScenarioLog] = []

    def add_scenario(self, name) -> ScenarioLog:
        scenario = ScenarioLog(name)
        self.scenarios.append(scenario)
        return scenario

    def write(self, filepath: str):
        with open(filepath, 'w') as f:
            for scenario in self.scenarios:
                scenario.write(f)


def load_performance(filepath: str) -> PerformanceLog:
    performance = PerformanceLog()

    scenarios: Dict[str, ScenarioLog] = {}

    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            # scenario names may contain commas (file paths), the last four fields never do
            scenario_name, start_time_ms_str, end_time_ms_str, _, event_name = line.rsplit(',', 4)
            start_time_ms = float(start_time_ms_str)
            end_time_ms = float(end_time_ms_str)

            scenario = scenarios.get(scenario_name)

            if scenario is None:
                scenario = performance.add_scenario(scenario_name)
                scenarios[scenario_name] = scenario

            scenario.log(event_name, start_time_ms, end_time_ms)

    return performance


@dataclass
class PhaseSummary:
    name: str
    count: int
    total_ms: float
    mean_ms: float
    p50_ms: float
    p95_ms: float
    max_ms: float
    slowest: List[tuple]


def summarize_performance(performance: PerformanceLog, top: int = 10) -> List[PhaseSummary]:
    """
    Aggregate event durations per phase name across all scenarios, in the order
    phases were first seen. ``slowest`` holds up to ``top`` (scenario, duration_ms)
    pairs, slowest first.
    """
    durations: Dict[str, List[tuple]] = {}
    for scenario in performance.scenarios:
        for event in scenario.events:
            durations.setdefault(event.name, []).append((scenario.name, event.duration_ms))

    summaries = []
    for name, entries in durations.items():
        values = np.array([d for _, d in entries], dtype=np.float64)
        summaries.append(PhaseSummary(
            name=name,
            count=len(entries),
            total_ms=float(values.sum()),
            mean_ms=float(values.mean()),
            p50_ms=float(np.percentile(values, 50)),
            p95_ms=float(np.percentile(values, 95)),
            max_ms=float(values.max()),
            slowest=sorted(entries, key=lambda x: x[1], reverse=True)[:top],
        ))
    return summaries
