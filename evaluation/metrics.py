def calculate_metrics(results, eval_cases):
    case_map = {c["id"]: c for c in eval_cases}

    correct = 0
    total_steps = 0
    false_positives = 0
    missed = 0

    for r in results:
        expected = case_map[r["id"]]["expected"]

        for got, want in zip(r["methods"], expected):
            total_steps += 1
            if got == want:
                correct += 1
            elif want is None:
                # Mapped a step that has no implementation
                false_positives += 1
            elif got is None:
                missed += 1

    return {
        "step_accuracy": correct / total_steps if total_steps else 1.0,
        "false_positive_count": false_positives,
        "missed_count": missed,
        "total_cases": len(results),
        "total_steps": total_steps,
    }
