[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linuxprobes"
version = "1.0.0"
description = "Nagios-compatible monitoring checks for Linux: paging, swap, pressure stall, TCP, temperature, uptime, users and network"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "nagios",
    "icinga",
    "monitoring",
    "linux",
    "procfs",
    "sysfs",
    "plugins",
    "checks",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
check_paging = "linuxprobes.paging:main"
check_swap = "linuxprobes.swap:main"
check_pressure = "linuxprobes.pressure:main"
check_tcpcount = "linuxprobes.tcpcount:main"
check_temperature = "linuxprobes.temperature:main"
check_uptime = "linuxprobes.uptime:main"
check_users = "linuxprobes.users:main"
check_network = "linuxprobes.network:main"
check_network_collisions = "linuxprobes.network:main"
check_network_dropped = "linuxprobes.network:main"
check_network_errors = "linuxprobes.network:main"
check_network_multicast = "linuxprobes.network:main"

[tool.hatch.build.targets.wheel]
packages = ["linuxprobes"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
