import pytest
from unittest.mock import Mock
from langchain_core.documents import Document
from langchain_core.embeddings import FakeEmbeddings
from action_mapper.vector_store import MethodVectorStore
from action_mapper.tools.method_retriever import MethodRetriever


@pytest.fixture
def documents():
    return [
        Document(page_content="Method: pauseVideo (pause video). Class: PlayerScreen.",
                 metadata={"method_name": "pauseVideo", "class_name": "PlayerScreen", "platform": "ctv"}),
        Document(page_content="Method: openSettings (open settings). Class: HomeScreen.",
                 metadata={"method_name": "openSettings", "class_name": "HomeScreen", "platform": "web"}),
    ]


def _doc(method, class_name, platform=None):
    return Document(page_content=method, metadata={
        "method_name": method, "class_name": class_name, "platform": platform, "parameters": [],
    })


def test_build_and_search(tmp_path, documents):
    store = MethodVectorStore(
        embedding_model=FakeEmbeddings(size=8),
        index_path=str(tmp_path / "faiss_index")
    )

    # Build index
    store.build(documents)

    hits = store.search_with_scores("pause the video", k=1)

    assert store.is_initialized()
    assert len(hits) == 1
    assert "Method:" in hits[0][0].page_content


def test_save_and_load(tmp_path, documents):
    index_path = str(tmp_path / "faiss_index")
    MethodVectorStore(FakeEmbeddings(size=8), index_path).build(documents)

    reloaded = MethodVectorStore(FakeEmbeddings(size=8), index_path)
    reloaded.load()

    assert reloaded.is_initialized()
    assert len(reloaded.search_with_scores("settings", k=2)) == 2


def test_build_or_load_builds_when_missing(tmp_path, documents):
    store = MethodVectorStore(FakeEmbeddings(size=8), str(tmp_path / "absent"))

    store.build_or_load(documents)

    assert store.is_initialized()


def test_add_documents_builds_on_first_use(documents):
    store = MethodVectorStore(FakeEmbeddings(size=8))

    store.add_documents([])
    assert not store.is_initialized()

    store.add_documents(documents[:1])
    store.add_documents(documents[1:])
    assert len(store.search_with_scores("anything", k=5)) == 2


def test_empty_build_rejected():
    with pytest.raises(ValueError):
        MethodVectorStore(FakeEmbeddings(size=8)).build([])


def test_uninitialized_store_raises():
    with pytest.raises(RuntimeError):
        MethodVectorStore(FakeEmbeddings(size=8)).get_langchain_vectorstore()


class TestMethodRetriever:
    """Tests for MethodRetriever filtering and ordering."""

    @pytest.fixture
    def vector_store(self):
        store = Mock(spec=MethodVectorStore)
        store.is_initialized.return_value = True
        store.search_with_scores.return_value = [
            (_doc("openSettings", "HomeScreen", "web"), 0.8),
            (_doc("pauseVideo", "PlayerScreen", "ctv"), 0.6),
            (_doc("pausePlayback", "BaseScreen"), 0.6),
            (_doc("seekForwardToPosition", "PlayerScreen", "ctv"), 0.1),
        ]
        return store

    def test_requires_initialized_store(self):
        store = Mock(spec=MethodVectorStore)
        store.is_initialized.return_value = False

        with pytest.raises(RuntimeError):
            MethodRetriever(store)

    def test_platform_filter(self, vector_store):
        """Methods for other platforms are dropped; untagged methods stay."""
        matches = MethodRetriever(vector_store).query_methods("pause", platform="CTV")

        assert [m.method_name for m in matches] == ["pauseVideo", "pausePlayback", "seekForwardToPosition"]

    def test_min_confidence_and_top_k(self, vector_store):
        matches = MethodRetriever(vector_store, k=2).query_methods("pause", min_confidence=0.5)

        assert [m.method_name for m in matches] == ["openSettings", "pauseVideo"]
        vector_store.search_with_scores.assert_called_with("pause", k=6)

    def test_screen_breaks_ties(self, vector_store):
        """Equal scores prefer the requested screen without overriding higher scores."""
        matches = MethodRetriever(vector_store).query_methods("pause", screen="base")

        assert [m.method_name for m in matches][:3] == ["openSettings", "pausePlayback", "pauseVideo"]
