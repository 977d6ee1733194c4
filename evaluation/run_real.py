# evaluation/run_real.py
from action_mapper.app import ActionMapperApp
from action_mapper.config_loader import load_config_from_env

from evaluation.cases import EVAL_CASES
from evaluation.metrics import calculate_metrics
from evaluation.runner import run_evaluation

# Step 1: Config from .env / environment (real LLM, embeddings, page-object repo)
config = load_config_from_env()

# Step 2: Wire production collaborators through the public facade
app = ActionMapperApp(config)
app.initialize()

# Step 3: Run the scripted scenarios against the real stack
results = run_evaluation(app, EVAL_CASES)

for r in results:
    print(f"Case: {r['id']}")
    print("Methods:", r["methods"])
    print("Sources:", r["sources"])
    print(f"Latency: {r['latency_ms']}ms")
    print("-" * 50)

print("Metrics:", calculate_metrics(results, EVAL_CASES))

app.shutdown()
