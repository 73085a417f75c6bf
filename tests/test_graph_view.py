from __future__ import annotations

from pathlib import Path

import pytest
from PySide6.QtCore import QEvent, QPoint, QPointF, QSettings, Qt
from PySide6.QtGui import QMouseEvent, QWheelEvent
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication

from bordergraph.config import Preferences
from bordergraph.controller.session import GraphSession
from bordergraph.model.notifications import NotificationKind, Notification
from bordergraph.model.styling import Theme
from bordergraph.model.viewport import IDENTITY, ViewportTransform
from bordergraph.view.controls import GraphControls
from bordergraph.view.graph_view import EdgeItem, GraphView, NodeItem


@pytest.fixture
def isolated_settings(tmp_path: Path):
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)
    QSettings.setPath(QSettings.Format.IniFormat, QSettings.Scope.UserScope, str(tmp_path))
    yield tmp_path


@pytest.fixture
def view(qapp):
    v = GraphView()
    v.resize(800, 600)
    yield v
    v.detach()


def test_attach_builds_scene_items(view, abc_pairs) -> None:
    session = GraphSession(parent=view)
    view.attach(session)
    session.build(abc_pairs)

    items = view.scene().items()
    assert sum(isinstance(i, NodeItem) for i in items) == 3
    assert sum(isinstance(i, EdgeItem) for i in items) == 2
    assert session.is_mounted


def test_transform_goes_on_root_item(view, abc_pairs) -> None:
    session = GraphSession(parent=view)
    view.attach(session)
    session.build(abc_pairs)

    view.set_transform(ViewportTransform(k=2.0, x=10.0, y=20.0))

    node = next(i for i in view.scene().items() if isinstance(i, NodeItem))
    t = node.parentItem().transform()
    assert (t.m11(), t.dx(), t.dy()) == (2.0, 10.0, 20.0)


def test_detach_clears_scene(view, abc_pairs) -> None:
    session = GraphSession(parent=view)
    view.attach(session)
    session.build(abc_pairs)

    view.detach()

    assert view.session is None
    assert not any(isinstance(i, (NodeItem, EdgeItem)) for i in view.scene().items())
    assert not session.driver.is_running


def test_system_scheme_change_rethemes(view, abc_pairs) -> None:
    session = GraphSession(parent=view)
    view.attach(session)
    session.build(abc_pairs)
    received = []
    view.theme_changed.connect(lambda theme: received.append(theme))

    view._on_color_scheme_changed(Qt.ColorScheme.Dark)

    assert session.theme == Theme.DARK
    assert received == [Theme.DARK]


def test_controls_snap_to_step(qapp) -> None:
    controls = GraphControls(strength=120)
    values = []
    controls.strength_changed.connect(lambda v: values.append(v))

    controls.slider.setValue(187)

    assert controls.strength == 190
    assert values == [190]


def test_main_window_wires_session(qapp, isolated_settings, abc_pairs) -> None:
    from bordergraph.view.main_window import MainWindow

    window = MainWindow(abc_pairs, Preferences(strength=150.0, theme=Theme.DARK))

    assert window.session.graph is not None
    assert window.session.strength == 150.0
    assert window.act_dark.isChecked()

    window.controls.slider.setValue(200)
    assert window.session.simulation.strength == 200.0

    window.on_reset_view()
    window.session._on_reset_finished()
    assert window.session.viewport.transform == IDENTITY

    window.on_notification(Notification(NotificationKind.INFO, "Hello", "world"))
    assert window.statusBar().currentMessage() == "Hello: world"

    window.close()
    assert window.session.graph is None
    assert any(isolated_settings.rglob("*.ini"))


# ------------------------------------------------------------------------------
# Pointer, wheel and keyboard input
# ------------------------------------------------------------------------------

def _send_mouse(view: GraphView, kind: QEvent.Type, point: QPointF,
                button: Qt.MouseButton = Qt.MouseButton.LeftButton,
                buttons: Qt.MouseButton = Qt.MouseButton.LeftButton) -> None:
    target = view.viewport()
    event = QMouseEvent(kind, point, target.mapToGlobal(point), button, buttons, Qt.KeyboardModifier.NoModifier)
    QApplication.sendEvent(target, event)


def _press(view: GraphView, point: QPointF) -> None:
    _send_mouse(view, QEvent.Type.MouseButtonPress, point)


def _drag_to(view: GraphView, point: QPointF) -> None:
    _send_mouse(view, QEvent.Type.MouseMove, point, Qt.MouseButton.NoButton, Qt.MouseButton.LeftButton)


def _hover_to(view: GraphView, point: QPointF) -> None:
    _send_mouse(view, QEvent.Type.MouseMove, point, Qt.MouseButton.NoButton, Qt.MouseButton.NoButton)


def _release(view: GraphView, point: QPointF) -> None:
    _send_mouse(view, QEvent.Type.MouseButtonRelease, point, Qt.MouseButton.LeftButton, Qt.MouseButton.NoButton)


def _wheel(view: GraphView, point: QPointF, notches: int) -> None:
    target = view.viewport()
    event = QWheelEvent(
        point, target.mapToGlobal(point), QPoint(0, 0), QPoint(0, 120 * notches),
        Qt.MouseButton.NoButton, Qt.KeyboardModifier.NoModifier, Qt.ScrollPhase.NoScrollPhase, False,
    )
    QApplication.sendEvent(target, event)


def _node_point(view: GraphView, node_id: str) -> QPointF:
    node = next(i for i in view.scene().items() if isinstance(i, NodeItem) and i.node_id == node_id)
    return QPointF(view.mapFromScene(node.scenePos()))


@pytest.fixture
def live(view, abc_pairs):
    view.show()
    QTest.qWaitForWindowExposed(view)
    session = GraphSession(parent=view)
    view.attach(session)
    session.build(abc_pairs)
    # freeze the layout so node positions stay put between events
    session.driver.stop()
    notes = []
    session.notified.connect(lambda note: notes.append(note))
    return view, session, notes


def _infos(notes):
    return [n for n in notes if n.kind == NotificationKind.INFO]


def test_click_on_node_inspects_and_does_not_pan(live) -> None:
    view, session, notes = live
    point = _node_point(view, "B")

    _press(view, point)
    _release(view, point)

    assert [n.title for n in _infos(notes)] == ["B has borders with 2 countries"]
    assert session.viewport.transform == IDENTITY
    assert session.simulation.pinned() == []


def test_drag_pins_node_and_release_is_not_a_click(live) -> None:
    view, session, notes = live
    start = _node_point(view, "A")

    _press(view, start)
    _drag_to(view, QPointF(100.0, 100.0))

    assert session.simulation.pinned() == ["A"]
    assert session.simulation.arena.fx[0] == pytest.approx(100.0)

    _release(view, QPointF(100.0, 100.0))

    assert _infos(notes) == []
    assert session.simulation.pinned() == []
    assert session.viewport.transform == IDENTITY


def test_dragging_empty_space_pans(live) -> None:
    view, session, notes = live

    _press(view, QPointF(20.0, 20.0))
    _drag_to(view, QPointF(60.0, 40.0))
    _release(view, QPointF(60.0, 40.0))

    assert session.viewport.transform == ViewportTransform(k=1.0, x=40.0, y=20.0)
    assert _infos(notes) == []


def test_label_is_not_a_hit_target(live) -> None:
    view, session, notes = live
    node = next(i for i in view.scene().items() if isinstance(i, NodeItem) and i.node_id == "B")
    point = QPointF(view.mapFromScene(node.label.sceneBoundingRect().center()))

    _hover_to(view, point)
    _press(view, point)
    _release(view, point)

    assert session.interaction.hovered is None
    assert _infos(notes) == []


def test_hover_follows_pointer(live) -> None:
    view, session, _ = live

    _hover_to(view, _node_point(view, "C"))
    assert session.interaction.hovered == "C"

    _hover_to(view, QPointF(5.0, 5.0))
    assert session.interaction.hovered is None


def test_wheel_zooms_about_cursor_within_extent(live) -> None:
    view, session, _ = live
    anchor = QPointF(200.0, 150.0)

    _wheel(view, anchor, 1)
    assert session.viewport.transform.k == pytest.approx(2.0 ** 0.2)
    assert session.viewport.transform.invert((200.0, 150.0)) == pytest.approx((200.0, 150.0))

    _wheel(view, anchor, 30)
    assert session.viewport.transform.k == pytest.approx(4.0)

    _wheel(view, anchor, -60)
    assert session.viewport.transform.k == pytest.approx(0.1)


def test_keyboard_gestures(live) -> None:
    view, session, _ = live
    resets = []
    view.reset_requested.connect(lambda: resets.append(True))

    QTest.keyClick(view, Qt.Key.Key_Plus)
    assert session.viewport.transform.k == pytest.approx(2.0 ** 0.2)

    QTest.keyClick(view, Qt.Key.Key_Minus)
    assert session.viewport.transform.k == pytest.approx(1.0)

    x = session.viewport.transform.x
    QTest.keyClick(view, Qt.Key.Key_Left)
    assert session.viewport.transform.x == pytest.approx(x + 40.0)

    QTest.keyClick(view, Qt.Key.Key_Home)
    assert resets == [True]
