# linuxprobes

A set of monitoring checks for Linux hosts that speak the Nagios plugin
protocol. Each check reads the kernel's `/proc` and `/sys` interfaces (or the
utmp database), prints a single status line followed by performance data
after a ` | `, and exits with the usual plugin codes:

| Exit code | State    |
|-----------|----------|
| 0         | OK       |
| 1         | WARNING  |
| 2         | CRITICAL |
| 3         | UNKNOWN  |

Errors (unreadable files, bad arguments, unparseable thresholds) are written
to standard error and end the check with UNKNOWN, unless stated otherwise
below. Only the standard library is needed.

## Installation

```
pip install .
```

## Thresholds

Every check accepts `-w/--warning` and `-c/--critical` in the Nagios range
format:

| Range    | Alert when the value is |
|----------|-------------------------|
| `10`     | outside 0..10           |
| `10:`    | below 10                |
| `~:10`   | above 10                |
| `10:20`  | outside 10..20          |
| `@10:20` | inside 10..20           |

A trailing `%` on a number is accepted. The critical range is checked before
the warning range. A range that cannot be parsed, or whose start exceeds its
end, is a usage error.

## Checks

All checks accept `-h/--help` and `-V/--version`.

### check_paging

Memory and swap paging activity, measured over one second.

```
check_paging --swapping -w 10 -c 25
check_paging --swapping-only -w 40 -c 60
```

Without `-S/--swapping-only` the thresholds apply to major page faults per
second and the performance data lists the page-in, page-out, fault, free,
steal and scan counters; `-s/--swapping` adds swap-ins and swap-outs. With
`--swapping-only` the thresholds apply to the sum of swap-ins and swap-outs
per second and only those are reported. `-p/--paging` is accepted and
ignored.

### check_swap

Swap utilisation as a percentage of the total swap.

```
check_swap --vmstats -w 30% -c 50%
```

Any threshold given must contain a `%`. `-b`, `-k` (default), `-m` and `-g`
choose the unit of the reported sizes; `-s/--vmstats` adds swap page-ins and
page-outs per second, sampled over one second.

### check_pressure

Linux Pressure Stall Information from `/proc/pressure` (kernel 4.20 or
later).

```
check_pressure --cpu
check_pressure --io
check_pressure --memory --full -w 100 2
```

One of `-C/--cpu`, `-i/--io` or `-m/--memory` is required. The optional
trailing argument is the delay in seconds between two reads (default 1, at
most 60); thresholds apply to stall time in microseconds per second.
`-f/--full` selects the "full" line instead of "some" for the thresholds and
is valid for `--io` and `--memory` only.

### check_tcpcount

Counts the sockets in each TCP state; thresholds apply to established
connections.

```
check_tcpcount --tcp -w 1000 -c 1500
check_tcpcount --tcp --tcp6 -w 1500 -c 2000
check_tcpcount --tcp6 -w 1500 -c 2000
```

`-t/--tcp` reads the IPv4 table (the default when neither option is given),
`-6/--tcp6` the IPv6 table; with both the counts are added.

### check_temperature

Hardware temperature from the thermal zones in sysfs. Without
`-t/--thermal_zone` the hottest zone is reported.

```
check_temperature --list
check_temperature -w 80 -c 90
check_temperature -t 0 -w 80 -c 90
```

`-f` reports degrees Fahrenheit, `-k` Kelvin; Celsius is the default and the
thresholds use the chosen unit. When a zone is selected and it has a
critical trip point, that value is appended to the performance data.
`-l/--list` prints every zone and exits with UNKNOWN.

### check_uptime

How long the system has been running, with thresholds in minutes.

```
check_uptime
check_uptime --critical 15: --warning 30:
check_uptime --clock-monotonic -c 15: -w 30:
```

The uptime is read from `/proc/uptime`, or from the monotonic clock with
`-m/--clock-monotonic`.

### check_users

The number of users currently logged on, read from `/var/run/utmp`.

```
check_users -w 1
check_users -v
```

`-v/--verbose` also lists each logged-on user with PID, terminal, host and
login time. An unreadable utmp file counts as no users.

### check_network

Per-interface network statistics from `/sys/class/net`, sampled over a delay
in seconds (default 1, at most 60) and reported per second.

```
check_network
check_network --check-link --ifname "^(enp|eth)" 15
check_network --check-link --ifname ^wlp --warning 645120 15
check_network --ifname "^(enp|wlp)" --ifname-debug -Cdm
check_network --perc --ifname "^(enp|eth)" -w 80% 15
check_network --no-loopback --no-wireless 15
```

The same check is installed under names that change what the thresholds
are applied to:

| Command                    | Threshold metric           |
|----------------------------|----------------------------|
| `check_network`            | bytes per second           |
| `check_network_collisions` | collisions per second      |
| `check_network_dropped`    | dropped packets per second |
| `check_network_errors`     | errors per second          |
| `check_network_multicast`  | multicast per second       |

- `-i/--ifname` selects interfaces whose name matches a Python regular
  expression.
- `-k/--check-link` ends with CRITICAL if a selected interface is not UP and
  RUNNING.
- `-l/--no-loopback` and `-W/--no-wireless` skip those interfaces.
- `-%/--perc` reports byte rates as a percentage of the link speed (halved
  on half-duplex links); with thresholds set, an interface without a known
  speed is an error.
- `-r/--rx-only` and `-t/--tx-only` limit the thresholds to one direction;
  the two cannot be combined.
- `-b`, `-C`, `-d`, `-e`, `-m` and `-p` drop bytes, collisions, drops,
  errors, multicast and packets from the performance data. The counter a
  command checks cannot be dropped.
- `--ifname-debug` prints the performance data keys of each selected
  interface, takes no delay, and exits with UNKNOWN.

No interfaces found means UNKNOWN; the status line names at most five.

## Testing against fixed files

These environment variables replace the system paths the checks read:

| Variable                         | Replaces              |
|----------------------------------|-----------------------|
| `NPL_TESTING_PATH_PROC_MEMINFO`  | `/proc/meminfo`       |
| `NPL_TESTING_PATH_PROC_VMSTAT`   | `/proc/vmstat`        |
| `NPL_TESTING_PATH_PROC`          | `/proc` (TCP tables)  |
| `NPL_TESTING_PATH_PROC_UPTIME`   | `/proc/uptime`        |
| `NPL_TESTING_PATH_SYS_THERMAL`   | `/sys/class/thermal`  |
| `NPL_TESTING_PATH_SYS_CLASS_NET` | `/sys/class/net`      |
| `NPL_TESTING_PATH_UTMP`          | `/var/run/utmp`       |

## Using the modules

Each check is split into parsing and formatting functions that can be called
directly, for example:

```python
from linuxprobes.thresholds import set_thresholds, get_status
from linuxprobes.procfs import read_meminfo
from linuxprobes.swap import swap_percent_used

thresholds = set_thresholds("30%", "50%")
status = get_status(swap_percent_used(read_meminfo()), thresholds)
```

Other entry points include `linuxprobes.pressure.parse_psi`,
`linuxprobes.tcpcount.count_tcp_states`,
`linuxprobes.temperature.list_thermal_zones`,
`linuxprobes.users.parse_utmp`, `linuxprobes.uptime.format_uptime` and
`linuxprobes.netinfo.netinfo`. Every command's `main(argv=None)` returns the
exit code instead of exiting.

## What is not included

The package covers only the checks listed above. There are no checks for
container runtimes, read-only filesystems, CPU usage or frequency, memory
usage, disk or file counts, or process counts, and no daemon or scheduler:
the checks are meant to be run by a monitoring system.

## Running the tests

```
pip install .[test]
pytest
```