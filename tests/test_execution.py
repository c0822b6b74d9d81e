import pytest

from rmfsched.execution import ExecutionInterface, ExecutionObserverBase


class Recorder(ExecutionObserverBase):
    def __init__(self):
        self.completed = []
        self.updates = []

    def completion_callback(self, id, success, detail=""):
        self.completed.append((id, success, detail))

    def update(self, id, remaining_time):
        self.updates.append((id, remaining_time))


class FakeRunner(ExecutionInterface):
    def __init__(self):
        super().__init__()
        self.started = []

    def start(self, id, task_details):
        self.started.append(id)
        self.notify_completion(id, True, "completed")

    def pause(self, id):
        pass

    def resume(self, id):
        pass

    def cancel(self, id):
        self.notify_completion(id, False, "canceled")


def test_start_notifies_attached_observer():
    runner = FakeRunner()
    ExecutionInterface.init(runner, None)
    recorder = Recorder()
    ExecutionInterface.attach(runner, recorder)
    runner.start("t1", {})
    runner.cancel("t2")
    assert runner.started == ["t1"]
    assert recorder.completed == [("t1", True, "completed"), ("t2", False, "canceled")]


def test_update_reaches_every_observer():
    runner = FakeRunner()
    first, second = Recorder(), Recorder()
    ExecutionInterface.attach(runner, first)
    ExecutionInterface.attach(runner, second)
    ExecutionInterface.update(runner, "t1", 300)
    assert first.updates == [("t1", 300)]
    assert second.updates == [("t1", 300)]


def test_detached_observer_gets_nothing():
    runner = FakeRunner()
    recorder = Recorder()
    ExecutionInterface.attach(runner, recorder)
    ExecutionInterface.detach(runner, recorder)
    ExecutionInterface.detach(runner, recorder)
    ExecutionInterface.notify_completion(runner, "t1", False, "failed")
    assert recorder.completed == []


def test_detail_defaults_to_empty():
    runner = FakeRunner()
    recorder = Recorder()
    ExecutionInterface.attach(runner, recorder)
    ExecutionInterface.notify_completion(runner, "t1", True)
    assert recorder.completed == [("t1", True, "")]


def test_interfaces_are_abstract():
    with pytest.raises(TypeError):
        ExecutionInterface()
    with pytest.raises(TypeError):
        ExecutionObserverBase()