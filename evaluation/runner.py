from time import time

from action_mapper.orchestration import PipelineOptions
from action_mapper.security import StepValidator


def run_evaluation(mapper_service, eval_cases):
    results = []

    for case in eval_cases:
        steps = StepValidator.validate_steps(case["steps"])
        start = time()
        report = mapper_service.map_steps(steps, PipelineOptions(platform=case.get("platform")))
        latency_ms = int((time() - start) * 1000)

        by_step = {r.step.action: r for r in report.mappings + report.unmapped}
        methods = [by_step[s.action].method_name if s.action in by_step else None for s in steps]

        results.append({
            "id": case["id"],
            "methods": methods,
            "sources": [by_step[s.action].source.value if by_step[s.action].source else None for s in steps],
            "mapping_rate": report.statistics.mapping_rate,
            "average_confidence": report.statistics.average_confidence,
            "latency_ms": latency_ms,
        })

    return results
