from action_mapper.agent import LLMRanker
from action_mapper.config import ActionMapperConfig
from action_mapper.knowledge import ActionKnowledgeStore, LearningWriter
from action_mapper.models import AtomicAction
from action_mapper.service import ActionMapperService

from evaluation.cases import EVAL_ATOMIC_ACTIONS, EVAL_CASES
from evaluation.dummy_llm import DummyChatModel
from evaluation.dummy_tools import DummyRetriever
from evaluation.metrics import calculate_metrics
from evaluation.runner import run_evaluation

# Step 1: Evaluation config (in-memory store, no network)
config = ActionMapperConfig(warmup_on_start=False, gather_timeout_seconds=5.0)

# Step 2: Knowledge store seeded with the evaluation actions
store = ActionKnowledgeStore(storage_dir=None)
store.add_atomic_actions(AtomicAction.from_dict(a) for a in EVAL_ATOMIC_ACTIONS)

# Step 3: Create service and inject dummy collaborators
service = ActionMapperService(config)
service.set_knowledge_store(store)
service.set_retriever(DummyRetriever())
service.set_ranker(LLMRanker(DummyChatModel(), timeout_seconds=5.0))
service.set_learning_writer(LearningWriter(store))

# Step 4: Warmup safely
service.warmup()

# Step 5: Run the scripted scenarios
results = run_evaluation(service, EVAL_CASES)
service.flush(timeout=5.0)

for r in results:
    print(f"Case: {r['id']}")
    print("Methods:", r["methods"])
    print("Sources:", r["sources"])
    print(f"Mapping rate: {r['mapping_rate']:.1f}%  Latency: {r['latency_ms']}ms")
    print("-" * 50)

print("Metrics:", calculate_metrics(results, EVAL_CASES))
print("Engine:", service.get_stats().get("engine"))

service.shutdown()
