"""
Tests for Dispatcher: local/remote routing, payload mapping, streaming URLs.
"""

import asyncio
import inspect
import json

import httpx
import pytest
from pydantic import BaseModel

from vmdesk_sdk.api_types import (
    DiskAttachParams,
    Host,
    NICAttachParams,
    VM,
    VMCreateParams,
)
from vmdesk_sdk.clients.base import ClientMode, RemoteEndpoint
from vmdesk_sdk.core.mode_registry import ModeRegistry
from vmdesk_sdk.dispatch import Dispatcher
from vmdesk_sdk.errors import ActionError, ConfigurationError, LocalBindingError
from vmdesk_sdk.operations import OPERATION_LIST, Operation, PayloadStyle


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _RecordingBinding:
    """Local binding double: every attribute is a callable that records its call."""

    def __init__(self, results: dict | None = None, port: int = 7000):
        self.calls = []
        self.results = results or {}
        self.port = port

    def terminal_port(self):
        self.calls.append(("terminal_port", ()))
        return self.port

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def func(*args):
            self.calls.append((name, args))
            return self.results.get(name)

        return func


class _RecordingRemote:
    """Remote client double installed through the registry's client_factory."""

    instances = []

    def __init__(self, endpoint, **options):
        self.endpoint = endpoint
        self.base_url = endpoint.base_url
        self.options = options
        self.calls = []
        self.result = None
        _RecordingRemote.instances.append(self)

    async def invoke(self, action, payload=None):
        self.calls.append((action, payload))
        return self.result


_MODEL_SAMPLES = {
    VMCreateParams: lambda: VMCreateParams(name="vm1"),
    DiskAttachParams: lambda: DiskAttachParams(source="/var/lib/libvirt/images/d.qcow2", target="vdb"),
    NICAttachParams: lambda: NICAttachParams(type="bridge", source="br0"),
}


def _sample(param):
    ann = param.annotation
    if ann is bool:
        return True
    if ann is int:
        return 3
    if isinstance(ann, type) and issubclass(ann, BaseModel):
        return _MODEL_SAMPLES.get(ann, ann)()
    return f"{param.name}-value"


def _sample_args(op: Operation) -> tuple:
    return tuple(_sample(p) for p in op.params)


def _make_local(binding=None) -> Dispatcher:
    return Dispatcher(ModeRegistry(client_factory=_RecordingRemote), binding)


def _make_remote(binding=None) -> tuple[Dispatcher, _RecordingRemote]:
    registry = ModeRegistry(client_factory=_RecordingRemote)
    client = registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443", "tok"))
    return Dispatcher(registry, binding), client


def _make_http_dispatcher(handler, binding=None) -> Dispatcher:
    registry = ModeRegistry(transport=httpx.MockTransport(handler))
    registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443", "tok"))
    return Dispatcher(registry, binding)


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------

class TestLocalMode:
    @pytest.mark.asyncio
    async def test_every_operation_calls_binding_positionally(self):
        _RecordingRemote.instances.clear()
        binding = _RecordingBinding()
        api = _make_local(binding)

        for op in OPERATION_LIST:
            args = _sample_args(op)
            binding.calls.clear()
            await getattr(api, op.name)(*args)
            assert binding.calls == [(op.name, args)], op.name

        assert _RecordingRemote.instances == []

    @pytest.mark.asyncio
    async def test_result_returned_unchanged(self):
        raw = [{"name": "vm1", "state": "running"}]
        api = _make_local(_RecordingBinding(results={"vm_list": raw}))
        assert await api.vm_list("h1") is raw

    @pytest.mark.asyncio
    async def test_keyword_arguments_normalized(self):
        binding = _RecordingBinding()
        api = _make_local(binding)
        await api.vm_start(vm_name="web-01", host_id="h1")
        assert binding.calls == [("vm_start", ("h1", "web-01"))]

    @pytest.mark.asyncio
    async def test_wrong_arity_raises_type_error(self):
        api = _make_local(_RecordingBinding())
        with pytest.raises(TypeError, match="vm_start"):
            await api.vm_start("h1")

    @pytest.mark.asyncio
    async def test_async_binding_is_awaited(self):
        class AsyncBinding:
            def terminal_port(self):
                return 7000

            async def app_version(self):
                return "1.2.3"

        api = _make_local(AsyncBinding())
        assert await api.app_version() == "1.2.3"

    @pytest.mark.asyncio
    async def test_binding_error_propagates_unchanged(self):
        boom = RuntimeError("virsh: domain not found")

        class FailingBinding:
            def terminal_port(self):
                return 7000

            def vm_start(self, host_id, vm_name):
                raise boom

        api = _make_local(FailingBinding())
        with pytest.raises(RuntimeError) as exc_info:
            await api.vm_start("h1", "web-01")
        assert exc_info.value is boom

    @pytest.mark.asyncio
    async def test_no_binding(self):
        api = _make_local(None)
        with pytest.raises(LocalBindingError) as exc_info:
            await api.host_list()
        assert exc_info.value.operation == "host_list"

    @pytest.mark.asyncio
    async def test_binding_missing_operation(self):
        class PartialBinding:
            def terminal_port(self):
                return 7000

        api = _make_local(PartialBinding())
        with pytest.raises(LocalBindingError):
            await api.vm_start("h1", "web-01")


# ---------------------------------------------------------------------------
# Remote mode
# ---------------------------------------------------------------------------

class TestRemoteMode:
    @pytest.mark.asyncio
    async def test_every_operation_invokes_its_action_once(self):
        binding = _RecordingBinding()
        api, client = _make_remote(binding)

        for op in OPERATION_LIST:
            client.calls.clear()
            await getattr(api, op.name)(*_sample_args(op))

            assert len(client.calls) == 1, op.name
            action, payload = client.calls[0]
            assert action == op.action
            if op.style == PayloadStyle.FIELDS:
                assert tuple(payload) == op.fields
            elif op.style == PayloadStyle.NONE:
                assert payload == {}

        assert binding.calls == []

    @pytest.mark.asyncio
    async def test_field_names(self):
        api, client = _make_remote()
        await api.vm_set_memory("h1", "web-01", 2048)
        await api.host_delete("h1")
        await api.nat_rule_add("h1", "tcp", "8080", "192.168.122.10", "80", "web")
        await api.volume_create("h1", "default", "data", 10, "qcow2")

        assert client.calls == [
            ("vm.setMemory", {"hostId": "h1", "vmName": "web-01", "sizeMB": 2048}),
            ("host.delete", {"id": "h1"}),
            ("nat.add", {
                "hostId": "h1", "proto": "tcp", "hostPort": "8080",
                "vmIP": "192.168.122.10", "vmPort": "80", "comment": "web",
            }),
            ("vol.create", {
                "hostId": "h1", "poolName": "default", "volName": "data",
                "sizeGB": 10, "format": "qcow2",
            }),
        ]

    @pytest.mark.asyncio
    async def test_object_payload(self):
        api, client = _make_remote()
        host = Host(name="lab", host="10.0.0.9", auth_type="password", password="pw")
        await api.host_add(host)

        action, payload = client.calls[0]
        assert action == "host.add"
        assert payload["name"] == "lab"
        assert payload["authType"] == "password"
        assert payload["password"] == "pw"

    @pytest.mark.asyncio
    async def test_object_payload_accepts_mapping(self):
        api, client = _make_remote()
        await api.flavor_add({"name": "small", "cpus": 1, "memoryMB": 512, "diskGB": 10})
        assert client.calls == [
            ("flavor.add", {"name": "small", "cpus": 1, "memoryMB": 512, "diskGB": 10})
        ]

    @pytest.mark.asyncio
    async def test_object_payload_rejects_scalars(self):
        api, _ = _make_remote()
        with pytest.raises(TypeError, match="flavor_add"):
            await api.flavor_add("small")

    @pytest.mark.asyncio
    async def test_structured_params(self):
        api, client = _make_remote()
        await api.vm_create("h1", VMCreateParams(name="vm1", memory_mb=2048, disk_size_gb=40))

        action, payload = client.calls[0]
        assert action == "vm.create"
        assert payload["hostId"] == "h1"
        assert payload["params"]["name"] == "vm1"
        assert payload["params"]["memoryMB"] == 2048
        assert payload["params"]["diskSizeGB"] == 40

    @pytest.mark.asyncio
    async def test_vm_list_over_http(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"code": 0, "data": [{"name": "vm1"}]})

        api = _make_http_dispatcher(handler)
        assert await api.vm_list("h1") == [{"name": "vm1"}]
        assert bodies == [{"action": "vm.list", "data": {"hostId": "h1"}}]

    @pytest.mark.asyncio
    async def test_vm_list_action_error_over_http(self):
        api = _make_http_dispatcher(
            lambda request: httpx.Response(200, json={"code": 1, "msg": "no host"})
        )
        with pytest.raises(ActionError, match="^no host$"):
            await api.vm_list("h1")


# ---------------------------------------------------------------------------
# Mode selection
# ---------------------------------------------------------------------------

class TestModeSelection:
    @pytest.mark.asyncio
    async def test_switch_is_seen_by_next_call(self):
        binding = _RecordingBinding()
        registry = ModeRegistry(client_factory=_RecordingRemote)
        api = Dispatcher(registry, binding)

        await api.host_list()
        client = registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443"))
        await api.host_list()
        registry.switch_to_local()
        await api.host_list()

        assert binding.calls == [("host_list", ()), ("host_list", ())]
        assert client.calls == [("host.list", {})]
        assert api.mode == ClientMode.LOCAL

    @pytest.mark.asyncio
    async def test_in_flight_call_keeps_its_mode(self):
        started = asyncio.Event()
        release = asyncio.Event()

        class SlowBinding:
            def terminal_port(self):
                return 7000

            async def vm_list(self, host_id):
                started.set()
                await release.wait()
                return ["local"]

        registry = ModeRegistry(client_factory=_RecordingRemote)
        api = Dispatcher(registry, SlowBinding())

        task = asyncio.create_task(api.vm_list("h1"))
        await started.wait()
        client = registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443"))
        release.set()

        assert await task == ["local"]
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_call_by_method_or_action_name(self):
        binding = _RecordingBinding()
        api = _make_local(binding)
        await api.call("vm_start", "h1", "a")
        await api.call("vm.start", "h1", "b")
        assert binding.calls == [("vm_start", ("h1", "a")), ("vm_start", ("h1", "b"))]

    @pytest.mark.asyncio
    async def test_unknown_operation(self):
        api = _make_local(_RecordingBinding())
        with pytest.raises(ConfigurationError):
            await api.call("vm.teleport")


# ---------------------------------------------------------------------------
# Streaming URLs
# ---------------------------------------------------------------------------

class TestStreamingURLs:
    @pytest.mark.asyncio
    async def test_local_terminal_url(self):
        binding = _RecordingBinding(port=7000)
        api = _make_local(binding)
        url = await api.terminal_url({"hostId": "h1", "vmName": "web-01"})
        assert url == "ws://127.0.0.1:7000/ws/terminal?hostId=h1&vmName=web-01"

    @pytest.mark.asyncio
    async def test_local_vnc_uses_terminal_port(self):
        binding = _RecordingBinding(port=7001)
        api = _make_local(binding)
        url = await api.vnc_url({"hostId": "h1"})
        assert url == "ws://127.0.0.1:7001/ws/vnc?hostId=h1"
        assert binding.calls == [("terminal_port", ())]

    @pytest.mark.asyncio
    async def test_local_stream_host_override(self):
        api = Dispatcher(ModeRegistry(), _RecordingBinding(port=7000), local_stream_host="localhost")
        assert await api.terminal_url({}) == "ws://localhost:7000/ws/terminal?"

    @pytest.mark.asyncio
    async def test_local_boolean_params_are_lowercase(self):
        api = _make_local(_RecordingBinding(port=7000))
        url = await api.vnc_url({"hostId": "h1", "viewOnly": True})
        assert url == "ws://127.0.0.1:7000/ws/vnc?hostId=h1&viewOnly=true"

    @pytest.mark.asyncio
    async def test_remote_terminal_url(self):
        binding = _RecordingBinding()
        registry = ModeRegistry()
        registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443", "tok"))
        api = Dispatcher(registry, binding)

        url = await api.terminal_url({"hostId": "h1", "vmName": "web-01"})
        assert url == "wss://10.0.0.5:8443/ws/terminal?hostId=h1&vmName=web-01&token=tok"
        assert binding.calls == []

    @pytest.mark.asyncio
    async def test_remote_vnc_url(self):
        registry = ModeRegistry()
        registry.switch_to_remote(RemoteEndpoint("http://server:9600", "tok"))
        api = Dispatcher(registry)
        assert await api.vnc_url({"hostId": "h1"}) == "ws://server:9600/ws/vnc?hostId=h1&token=tok"


# ---------------------------------------------------------------------------
# Generated surface & typed results
# ---------------------------------------------------------------------------

class TestGeneratedMethods:
    def test_every_operation_is_a_method(self):
        for op in OPERATION_LIST:
            method = getattr(Dispatcher, op.name)
            assert inspect.iscoroutinefunction(method)
            assert method.operation is op

    def test_signature(self):
        params = list(inspect.signature(Dispatcher.vm_start).parameters)
        assert params == ["self", "host_id", "vm_name"]

    def test_decode_result(self):
        vms = Dispatcher.decode_result(
            "vm_list", [{"name": "vm1", "memoryMB": 2048, "hostID": "h1", "extra": 1}]
        )
        assert isinstance(vms[0], VM)
        assert vms[0].memory_mb == 2048
        assert vms[0].host_id == "h1"

    def test_decode_result_passthrough(self):
        assert Dispatcher.decode_result("vm_start", None) is None
        assert Dispatcher.decode_result("instance_by_vm_name", None) is None
