import pytest

from action_mapper.data_loader import PageObjectLoader, detect_platform_and_brand, parse_java_source
from action_mapper.knowledge import ActionKnowledgeStore, extract_keywords, index_methods, to_atomic_action
from action_mapper.models import PageObjectMethod

PLAYER_SCREEN = """
package com.example.ctvscreens.pplus;

public class PlayerScreen extends BaseScreen {

    /**
     * Waits until the video starts playing.
     * @param timeout seconds to wait
     */
    public void waitForVideoLoaded(int timeout) {
    }

    public boolean isPlaying() {
        return true;
    }

    public String getTitle() {
        return "";
    }

    @Override
    public void seekForwardToPosition(int seconds, String label) {
    }

    private void internalHelper() {
    }
}
"""


@pytest.fixture
def repo(tmp_path):
    screens = tmp_path / "src" / "ctvscreens" / "pplus"
    screens.mkdir(parents=True)
    (screens / "PlayerScreen.java").write_text(PLAYER_SCREEN)
    (screens / "PlayerUtils.java").write_text(PLAYER_SCREEN.replace("PlayerScreen", "PlayerUtils"))
    ignored = tmp_path / "target" / "ctvscreens"
    ignored.mkdir(parents=True)
    (ignored / "HomeScreen.java").write_text(PLAYER_SCREEN.replace("PlayerScreen", "HomeScreen"))
    return tmp_path


def test_parse_public_methods():
    methods = parse_java_source(PLAYER_SCREEN, relative_path="ctvscreens/pplus/PlayerScreen.java")

    assert [m.method_name for m in methods] == ["waitForVideoLoaded", "seekForwardToPosition"]
    assert all(m.class_name == "PlayerScreen" for m in methods)


def test_parse_parameters_and_javadoc():
    wait, seek = parse_java_source(PLAYER_SCREEN)

    assert wait.parameters == ["int timeout"]
    assert wait.javadoc == "Waits until the video starts playing."
    assert seek.parameters == ["int seconds", "String label"]
    assert seek.javadoc is None


def test_source_without_class():
    assert parse_java_source("interface Nothing {}") == []


def test_detect_platform_and_brand():
    assert detect_platform_and_brand("ui/ctvscreens/pplus/PlayerScreen.java") == ("ctv", "pplus")
    assert detect_platform_and_brand("web/pages/HomePage.java") == ("web", None)
    assert detect_platform_and_brand("screens/PlayerScreen.java") == (None, None)


def test_loader_reads_screen_files_only(repo):
    loader = PageObjectLoader(str(repo))
    methods = loader.load_methods()

    assert loader.files_scanned == 1
    assert {m.class_name for m in methods} == {"PlayerScreen"}
    assert methods[0].relative_path == "src/ctvscreens/pplus/PlayerScreen.java"
    assert methods[0].platform == "ctv"
    assert methods[0].brand == "pplus"


def test_extract_keywords():
    keywords = extract_keywords("clickPlayButton")

    assert keywords[0] == "click"
    assert "tap" in keywords
    assert "start" in keywords
    assert "button" in keywords


def test_to_atomic_action():
    method = PageObjectMethod(
        class_name="PlayerScreen",
        method_name="waitForVideoLoaded",
        parameters=["int timeout"],
        relative_path="ctvscreens/pplus/PlayerScreen.java",
        platform="ctv",
        brand="pplus",
    )

    record = to_atomic_action(method)

    assert record.id == "method_ctv_pplus_PlayerScreen_waitForVideoLoaded"
    assert record.action_name == "wait_for_video_loaded"
    assert record.target_screen == "player"
    assert record.file == "ctvscreens/pplus/PlayerScreen.java"
    assert record.confidence == 0.8


def test_index_methods(repo):
    store = ActionKnowledgeStore(storage_dir=None)
    methods = PageObjectLoader(str(repo)).load_methods()

    stats = index_methods(store, methods)

    assert stats == {"methodsFound": 2, "actionsCreated": 2}
    assert store.find_atomic_action("wait for video").best.method_name == "waitForVideoLoaded"
