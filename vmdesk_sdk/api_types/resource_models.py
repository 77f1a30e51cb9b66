#!/usr/bin/env python3
"""
Resource models exchanged with the management helper / server.

Field names follow Python conventions; the wire names are camelCase aliases
and are what ``model_dump(by_alias=True)`` produces. Unknown fields are kept
so a newer peer does not break older clients.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for all wire resources (camelCase on the wire)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ==================== Inventory ====================

class Host(WireModel):
    """Hypervisor host reachable over SSH"""
    id: str = ""
    name: str = ""
    host: str = ""
    port: int = 22
    user: str = "root"
    auth_type: str = "key"
    key_path: str = ""
    password: str = Field(default="", repr=False)
    host_key: str = ""
    proxy_addr: str = ""
    sort_order: int = 0
    created_at: str = ""
    updated_at: str = ""


class Flavor(WireModel):
    """Instance size template"""
    id: str = ""
    name: str = ""
    cpus: int = 1
    memory_mb: int = Field(default=1024, alias="memoryMB")
    disk_gb: int = Field(default=20, alias="diskGB")
    sort_order: int = 0
    created_at: str = ""


class Image(WireModel):
    """Base disk image registered on a host"""
    id: str = ""
    host_id: str = ""
    name: str = ""
    base_path: str = ""
    os_variant: str = ""
    sort_order: int = 0
    created_at: str = ""


class ImageSource(WireModel):
    """Download source for cloud images"""
    id: str = ""
    name: str = ""
    url: str = ""
    os_variant: str = ""
    file_name: str = ""
    description: str = ""
    sort_order: int = 0
    created_at: str = ""


class Instance(WireModel):
    """VM created from a flavor/image template"""
    id: int = 0
    host_id: str = ""
    vm_name: str = ""
    flavor_id: str = ""
    image_id: str = ""
    created_at: str = ""


# ==================== Operation Parameters ====================

class VMCreateParams(WireModel):
    """Parameters for a fresh VM install"""
    name: str
    cpus: int = 1
    memory_mb: int = Field(default=1024, alias="memoryMB")
    disk_path: str = ""
    disk_size_gb: int = Field(default=20, alias="diskSizeGB")
    cdrom: str = ""
    network: str = ""
    net_type: str = ""
    os_variant: str = ""
    vnc: bool = True
    boot_dev: str = ""


class DiskAttachParams(WireModel):
    source: str
    target: str
    driver: str = ""
    cache: str = ""
    dev_type: str = ""


class NICAttachParams(WireModel):
    type: str
    source: str
    model: str = ""


class CloudInitConfig(WireModel):
    """Seed data rendered into a cloud-init ISO"""
    hostname: str = ""
    user: str = ""
    password: str = Field(default="", repr=False)
    ssh_key: str = ""
    user_data: str = ""


# ==================== Virtual Machines ====================

class VM(WireModel):
    id: int = 0
    name: str = ""
    state: str = ""
    cpus: int = 0
    memory_mb: int = Field(default=0, alias="memoryMB")
    host_id: str = Field(default="", alias="hostID")


class NIC(WireModel):
    mac: str = ""
    bridge: str = ""
    network: str = ""
    ip: str = ""
    model: str = ""


class Disk(WireModel):
    device: str = ""
    path: str = ""
    size_gb: float = Field(default=0, alias="sizeGB")
    format: str = ""


class VMDetail(VM):
    autostart: bool = False
    vnc_port: int = 0
    nics: List[NIC] = Field(default_factory=list)
    disks: List[Disk] = Field(default_factory=list)


class VMResourceStats(WireModel):
    cpu_time: int = 0
    cpu_percent: float = 0.0
    vcpus: int = 0
    mem_actual: int = 0
    mem_rss: int = Field(default=0, alias="memRSS")
    net_rx_bytes: int = 0
    net_tx_bytes: int = 0
    block_rd_bytes: int = 0
    block_wr_bytes: int = 0


class Snapshot(WireModel):
    name: str = ""
    created_at: str = ""
    state: str = ""
    parent: str = ""


# ==================== Host Monitoring ====================

class HostStats(WireModel):
    cpu_percent: float = 0.0
    mem_total: int = 0
    mem_used: int = 0
    mem_percent: float = 0.0
    disk_total: int = 0
    disk_used: int = 0
    disk_percent: float = 0.0
    uptime: str = ""
    load_avg: str = ""


class HostStatsRecord(WireModel):
    id: int = 0
    host_id: str = ""
    cpu_percent: float = 0.0
    mem_percent: float = 0.0
    disk_percent: float = 0.0
    timestamp: str = ""


class VMStatsRecord(WireModel):
    id: int = 0
    host_id: str = ""
    vm_name: str = ""
    cpu_percent: float = 0.0
    mem_used: int = 0
    net_rx: int = 0
    net_tx: int = 0
    timestamp: str = ""


class AuditRecord(WireModel):
    id: int = 0
    host_id: str = ""
    vm_name: str = ""
    action: str = ""
    detail: str = ""
    timestamp: str = ""


# ==================== Storage & Network ====================

class StoragePool(WireModel):
    name: str = ""
    state: str = ""
    autostart: str = ""
    persistent: str = ""
    capacity: str = ""
    allocation: str = ""
    available: str = ""


class Volume(WireModel):
    name: str = ""
    path: str = ""
    type: str = ""
    capacity: str = ""
    allocation: str = ""


class Network(WireModel):
    name: str = ""
    state: str = ""
    autostart: str = ""
    persistent: str = ""
    bridge: str = ""


class NATRule(WireModel):
    proto: str = "tcp"
    host_port: str = ""
    vm_ip: str = Field(default="", alias="vmIP")
    vm_port: str = ""
    comment: str = ""


class ISOFile(WireModel):
    name: str = ""
    path: str = ""
    size: str = ""


class HostImageFile(ISOFile):
    """Image file discovered by scanning a host"""


# ==================== Helper Tasks ====================

class ImportTask(WireModel):
    """Progress of a background image download/upload"""
    id: str = ""
    host_id: str = ""
    status: str = ""
    percent: int = 0
    total_size: int = 0
    current: int = 0
    error: str = ""


class LibvirtSetupScript(WireModel):
    id: str = ""
    name: str = ""
    description: str = ""
    distros: str = ""
    script: str = ""


__all__ = [
    "WireModel",
    "Host", "Flavor", "Image", "ImageSource", "Instance",
    "VMCreateParams", "DiskAttachParams", "NICAttachParams", "CloudInitConfig",
    "VM", "VMDetail", "NIC", "Disk", "VMResourceStats", "Snapshot",
    "HostStats", "HostStatsRecord", "VMStatsRecord", "AuditRecord",
    "StoragePool", "Volume", "Network", "NATRule", "ISOFile", "HostImageFile",
    "ImportTask", "LibvirtSetupScript",
]
