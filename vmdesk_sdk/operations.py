#!/usr/bin/env python3
"""
Operation Table - every management operation declared as data

Each entry names:
- the Python method exposed by the Dispatcher (also the local binding name)
- the remote action identifier (``<resource>.<verb>``)
- the ordered parameters and the wire field each one maps to
- how the payload is shaped (named fields, a whole object, or empty)
- the documented result type (used only by ``decode_result``)

Action names and field names are a contract with the management server:
renaming one breaks remote mode. The table is validated on import.
"""

import inspect
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from .api_types.resource_models import (
    AuditRecord,
    CloudInitConfig,
    DiskAttachParams,
    Flavor,
    Host,
    HostImageFile,
    HostStats,
    HostStatsRecord,
    Image,
    ImageSource,
    ImportTask,
    Instance,
    ISOFile,
    LibvirtSetupScript,
    NATRule,
    Network,
    NICAttachParams,
    Snapshot,
    StoragePool,
    VM,
    VMCreateParams,
    VMDetail,
    VMResourceStats,
    VMStatsRecord,
    Volume,
)
from .errors import ConfigurationError

ACTION_PATTERN = re.compile(r"^[a-zA-Z]+\.[a-zA-Z]+$")


class PayloadStyle(str, Enum):
    """How positional arguments become the remote payload"""
    FIELDS = "fields"    # each argument becomes one named field
    OBJECT = "object"    # the single structured argument is the payload
    NONE = "none"        # no arguments, empty payload


@dataclass(frozen=True)
class Param:
    """One positional parameter and its wire field"""
    name: str
    field: str
    annotation: Any = str


@dataclass(frozen=True)
class Operation:
    """A single management operation"""
    name: str
    action: str
    params: Tuple[Param, ...] = ()
    style: PayloadStyle = PayloadStyle.FIELDS
    result: Any = None
    doc: str = ""

    @property
    def binding(self) -> str:
        """Attribute name on the local binding"""
        return self.name

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(p.field for p in self.params)

    @property
    def signature(self) -> inspect.Signature:
        return inspect.Signature(
            [
                inspect.Parameter(p.name, inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=p.annotation)
                for p in self.params
            ],
            return_annotation=self.result,
        )

    def bind_args(self, args: Sequence[Any], kwargs: Mapping[str, Any]) -> Tuple[Any, ...]:
        """Normalize call arguments to positional order (TypeError on mismatch)"""
        try:
            bound = self.signature.bind(*args, **kwargs)
        except TypeError as e:
            raise TypeError(f"{self.name}(): {e}") from None
        return tuple(bound.arguments[p.name] for p in self.params)

    def build_payload(self, args: Sequence[Any]) -> Dict[str, Any]:
        """Map positional arguments onto the remote payload"""
        if self.style == PayloadStyle.NONE:
            return {}
        if self.style == PayloadStyle.OBJECT:
            payload = to_wire(args[0])
            if not isinstance(payload, Mapping):
                raise TypeError(
                    f"{self.name}(): expected a model or mapping for '{self.params[0].name}', "
                    f"got {type(args[0]).__name__}"
                )
            return dict(payload)
        return {p.field: to_wire(value) for p, value in zip(self.params, args)}


def to_wire(value: Any) -> Any:
    """Serialize pydantic models (and lists of them) with their wire aliases"""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value


# ==================== Declaration Helpers ====================

_ANNOTATIONS: Dict[str, Any] = {
    "enabled": bool,
    "remove_storage": bool,
    "hours": int,
    "limit": int,
    "count": int,
    "size_mb": int,
    "size_gb": int,
    "new_size_gb": int,
    "instance_id": int,
    "image": Image,
    "config": CloudInitConfig,
}

HOST = "host_id:hostId"
VM_NAME = "vm_name:vmName"
POOL = "pool_name:poolName"
NET = "net_name:netName"


def _param(declaration: str) -> Param:
    name, _, field = declaration.partition(":")
    return Param(name, field or name, _ANNOTATIONS.get(name, str))


def _op(name: str, action: str, *params: str, result: Any = None, doc: str = "") -> Operation:
    style = PayloadStyle.FIELDS if params else PayloadStyle.NONE
    return Operation(name, action, tuple(_param(p) for p in params), style, result, doc)


def _obj(name: str, action: str, param: str, model: type, result: Any = None, doc: str = "") -> Operation:
    return Operation(name, action, (Param(param, param, model),), PayloadStyle.OBJECT, result, doc)


def _with_params(name: str, action: str, *params: str, model: type, doc: str = "") -> Operation:
    """Operation whose trailing ``params`` argument is a structured model"""
    declared = tuple(_param(p) for p in params) + (Param("params", "params", model),)
    return Operation(name, action, declared, PayloadStyle.FIELDS, None, doc)


# ==================== The Table ====================

OPERATION_LIST: List[Operation] = [
    # --- Application ---
    _op("app_version", "app.version", result=str, doc="Version string of the helper/server."),
    _op("terminal_port", "terminal.port", result=int, doc="Port of the terminal/VNC WebSocket server."),

    # --- Audit log ---
    _op("audit_list", "audit.list", HOST, "limit", result=List[AuditRecord]),
    _op("audit_list_all", "audit.listAll", "limit", result=List[AuditRecord]),

    # --- Hosts ---
    _op("host_list", "host.list", result=List[Host]),
    _obj("host_add", "host.add", "host", Host),
    _obj("host_update", "host.update", "host", Host),
    _op("host_delete", "host.delete", "host_id:id"),
    _op("host_connect", "host.connect", "host_id:id", doc="Open the SSH session to a host."),
    _op("host_disconnect", "host.disconnect", "host_id:id"),
    _obj("host_test", "host.test", "host", Host, result=str, doc="Probe connectivity without saving."),
    _op("host_reset_host_key", "host.resetHostKey", "host_id:id"),
    _op("host_get_fingerprint", "host.getFingerprint", "host_id:id", result=str),
    _op("host_is_connected", "host.isConnected", "host_id:id", result=bool),
    _op("host_resource_stats", "host.resourceStats", HOST, result=HostStats),
    _op("host_export_json", "host.exportJSON", result=str),
    _op("host_import_json", "host.importJSON", "json_text:json", result=int,
        doc="Import hosts from an export; returns the number imported."),
    _op("host_check_tools", "host.checkTools", "host_id:id", result=Dict[str, str]),
    _op("host_detect_distro", "host.detectDistro", "host_id:id", result=str),
    _op("host_run_script", "host.runScript", HOST, "script", result=str),
    _op("host_image_scan", "host.imageScan", HOST, result=List[HostImageFile]),
    _op("host_image_delete", "host.imageDelete", HOST, "path"),
    _op("host_stats_history", "host.statsHistory", HOST, "hours", result=List[HostStatsRecord]),

    # --- Virtual machines ---
    _op("vm_list", "vm.list", HOST, result=List[VM]),
    _op("vm_get", "vm.get", HOST, VM_NAME, result=VMDetail),
    _op("vm_start", "vm.start", HOST, VM_NAME),
    _op("vm_shutdown", "vm.shutdown", HOST, VM_NAME, doc="Graceful ACPI shutdown."),
    _op("vm_destroy", "vm.destroy", HOST, VM_NAME, doc="Hard power-off."),
    _op("vm_reboot", "vm.reboot", HOST, VM_NAME),
    _op("vm_suspend", "vm.suspend", HOST, VM_NAME),
    _op("vm_resume", "vm.resume", HOST, VM_NAME),
    _op("vm_delete", "vm.delete", HOST, VM_NAME, "remove_storage:removeStorage"),
    _op("vm_rename", "vm.rename", HOST, "old_name:oldName", "new_name:newName"),
    _op("vm_set_vcpus", "vm.setVCPUs", HOST, VM_NAME, "count"),
    _op("vm_set_memory", "vm.setMemory", HOST, VM_NAME, "size_mb:sizeMB"),
    _op("vm_set_autostart", "vm.setAutostart", HOST, VM_NAME, "enabled"),
    _op("vm_clone", "vm.clone", HOST, "src_name:srcName", "new_name:newName"),
    _op("vm_get_xml", "vm.getXML", HOST, VM_NAME, result=str),
    _op("vm_define_xml", "vm.defineXML", HOST, "xml_content:xmlContent"),
    _with_params("vm_create", "vm.create", HOST, model=VMCreateParams),
    _op("vm_stats", "vm.stats", HOST, VM_NAME, result=VMResourceStats),
    _op("vm_create_from_template", "vm.createFromTemplate", HOST, VM_NAME,
        "flavor_id:flavorId", "image_id:imageId", "net_type:netType", "net_name:netName",
        "root_password:rootPassword", "ssh_pub_key:sshPubKey"),
    _op("vm_migrate", "vm.migrate", "src_host_id:srcHostId", VM_NAME, "dst_host_id:dstHostId",
        doc="Live migration between two managed hosts."),
    _op("vm_migrate_offline", "vm.migrateOffline", "src_host_id:srcHostId", VM_NAME, "dst_host_id:dstHostId"),
    _op("vm_note_get", "vm.noteGet", HOST, VM_NAME, result=str),
    _op("vm_note_set", "vm.noteSet", HOST, VM_NAME, "note"),
    _op("vm_stats_history", "vm.statsHistory", HOST, VM_NAME, "hours", result=List[VMStatsRecord]),
    _with_params("vm_attach_disk", "vm.attachDisk", HOST, VM_NAME, model=DiskAttachParams),
    _op("vm_detach_disk", "vm.detachDisk", HOST, VM_NAME, "target"),
    _op("vm_resize_disk", "vm.resizeDisk", HOST, "disk_path:diskPath", "new_size_gb:newSizeGB"),
    _with_params("vm_attach_interface", "vm.attachInterface", HOST, VM_NAME, model=NICAttachParams),
    _op("vm_detach_interface", "vm.detachInterface", HOST, VM_NAME, "mac_addr:macAddr"),
    _op("vm_change_media", "vm.changeMedia", HOST, VM_NAME, "target", "source"),
    _op("vm_eject_media", "vm.ejectMedia", HOST, VM_NAME, "target"),
    _op("vm_set_graphics", "vm.setGraphics", HOST, VM_NAME, "enabled"),
    _op("vm_generate_cloud_init", "vm.generateCloudInit", HOST, "output_path:outputPath", "config"),

    # --- Snapshots ---
    _op("snapshot_list", "snapshot.list", HOST, VM_NAME, result=List[Snapshot]),
    _op("snapshot_create", "snapshot.create", HOST, VM_NAME, "snap_name:snapName"),
    _op("snapshot_delete", "snapshot.delete", HOST, VM_NAME, "snap_name:snapName"),
    _op("snapshot_revert", "snapshot.revert", HOST, VM_NAME, "snap_name:snapName"),

    # --- Storage pools & volumes ---
    _op("pool_list", "pool.list", HOST, result=List[StoragePool]),
    _op("pool_start", "pool.start", HOST, POOL),
    _op("pool_stop", "pool.stop", HOST, POOL),
    _op("pool_autostart", "pool.autostart", HOST, POOL, "enabled"),
    _op("volume_list", "vol.list", HOST, POOL, result=List[Volume]),
    _op("volume_create", "vol.create", HOST, POOL, "vol_name:volName", "size_gb:sizeGB", "format",
        result=str, doc="Create a volume; returns its path."),
    _op("volume_delete", "vol.delete", HOST, POOL, "vol_name:volName"),

    # --- Networks ---
    _op("network_list", "network.list", HOST, result=List[Network]),
    _op("network_start", "network.start", HOST, NET),
    _op("network_stop", "network.stop", HOST, NET),
    _op("network_autostart", "network.autostart", HOST, NET, "enabled"),
    _op("bridge_list", "bridge.list", HOST, result=List[str]),
    _op("nat_rule_list", "nat.list", HOST, result=List[NATRule]),
    _op("nat_rule_add", "nat.add", HOST, "proto", "host_port:hostPort", "vm_ip:vmIP",
        "vm_port:vmPort", "comment"),
    _op("nat_rule_delete", "nat.delete", HOST, "proto", "host_port:hostPort", "vm_ip:vmIP",
        "vm_port:vmPort"),

    # --- Install media ---
    _op("iso_list", "iso.list", HOST, result=List[ISOFile]),
    _op("os_variant_list", "osvariant.list", HOST, result=List[str]),

    # --- Flavors ---
    _op("flavor_list", "flavor.list", result=List[Flavor]),
    _obj("flavor_add", "flavor.add", "flavor", Flavor),
    _obj("flavor_update", "flavor.update", "flavor", Flavor),
    _op("flavor_delete", "flavor.delete", "flavor_id:id"),

    # --- Images ---
    _op("image_list", "image.list", HOST, result=List[Image]),
    _op("image_add", "image.add", HOST, "image"),
    _obj("image_update", "image.update", "image", Image),
    _op("image_delete", "image.delete", "image_id:id"),
    _op("image_import", "image.import", HOST, "url", "dest_path:destPath", "name",
        "os_variant:osVariant", result=str, doc="Start a background download; returns the task id."),
    _op("image_upload", "image.upload", HOST, "local_path:localPath", "dest_path:destPath", "name",
        "os_variant:osVariant", result=str, doc="Upload a file from this machine; returns the task id."),
    _op("image_import_status", "image.importStatus", result=List[ImportTask]),

    # --- Image sources ---
    _op("image_source_list", "imageSource.list", result=List[ImageSource]),
    _obj("image_source_add", "imageSource.add", "source", ImageSource),
    _obj("image_source_update", "imageSource.update", "source", ImageSource),
    _op("image_source_delete", "imageSource.delete", "source_id:id"),

    # --- Template instances ---
    _op("instance_list", "instance.list", HOST, result=List[Instance]),
    _op("instance_by_vm_name", "instance.byVMName", HOST, VM_NAME, result=Optional[Instance]),
    _op("instance_iso_list", "instance.isoList", HOST, "instance_id:instanceId", result=List[ISOFile]),

    # --- Host setup ---
    _op("libvirt_setup_script_list", "libvirt.setupScripts", result=List[LibvirtSetupScript]),

    # --- Settings ---
    _op("setting_get", "setting.get", "key", result=str),
    _op("setting_set", "setting.set", "key", "value"),
]


def _validate(operations: Sequence[Operation]) -> Dict[str, Operation]:
    by_name: Dict[str, Operation] = {}
    actions = set()
    for op in operations:
        if op.name in by_name:
            raise ConfigurationError(f"Duplicate operation name: {op.name}", field="name")
        if op.action in actions:
            raise ConfigurationError(f"Duplicate action: {op.action}", field="action")
        if not ACTION_PATTERN.match(op.action):
            raise ConfigurationError(f"Malformed action name: {op.action}", field="action")
        if len(set(op.fields)) != len(op.fields):
            raise ConfigurationError(f"Duplicate wire field in {op.action}", field="params")
        if len({p.name for p in op.params}) != len(op.params):
            raise ConfigurationError(f"Duplicate parameter in {op.name}", field="params")
        if op.style == PayloadStyle.OBJECT and len(op.params) != 1:
            raise ConfigurationError(f"{op.name}: object payload takes exactly one argument", field="params")
        if op.style == PayloadStyle.NONE and op.params:
            raise ConfigurationError(f"{op.name}: empty payload cannot take arguments", field="params")
        by_name[op.name] = op
        actions.add(op.action)
    return by_name


OPERATIONS: Dict[str, Operation] = _validate(OPERATION_LIST)
OPERATIONS_BY_ACTION: Dict[str, Operation] = {op.action: op for op in OPERATION_LIST}


def get_operation(name: str) -> Operation:
    """Look up an operation by method name or action name"""
    op = OPERATIONS.get(name) or OPERATIONS_BY_ACTION.get(name)
    if op is None:
        raise ConfigurationError(f"Unknown operation: {name}", field="name")
    return op


__all__ = [
    "Operation",
    "Param",
    "PayloadStyle",
    "OPERATIONS",
    "OPERATIONS_BY_ACTION",
    "OPERATION_LIST",
    "get_operation",
    "to_wire",
]
