# oslabs

A set of small, runnable labs about how an operating system behaves underneath
your programs. Each lab does something real on the machine. It forks and reaps
processes, ping-pongs bytes through pipes to time context switches, races threads
against each other, compares one global lock with per-bucket locks, and writes
and fsyncs files. It then prints what happened, followed by notes, exercises and
quiz questions.

The labs target Linux. Several of them read `/proc`, and several use `fork()`,
`mmap` and signals.

## Installing

```
pip install .
```

To install the test suite's requirements and run it:

```
pip install ".[test]"
pytest
```

## The labs

| Command                  | Module                    | Topic                                              |
|--------------------------|---------------------------|----------------------------------------------------|
| `oslabs-processes`       | `oslabs.processes`        | fork, exec, wait, zombies, `/proc/<pid>/status`    |
| `oslabs-context-switch`  | `oslabs.context_switch`   | process vs thread switch cost, `getpid()` latency  |
| `oslabs-concurrency`     | `oslabs.concurrency`      | data races, atomic counters, acquire/release       |
| `oslabs-finegrained`     | `oslabs.finegrained`      | one global lock vs per-bucket locks                |
| `oslabs-mpmc`            | `oslabs.mpmc`             | multi-producer multi-consumer queue, semaphores    |
| `oslabs-lockfree`        | `oslabs.lockfree`         | compare-and-swap stack, ABA and tagged pointers    |
| `oslabs-sync-primitives` | `oslabs.sync_primitives`  | futex-style wait/wake, sleep and wakeup            |
| `oslabs-signals-demand`  | `oslabs.signals_demand`   | signal delivery, demand paging and minor faults    |
| `oslabs-fs-ops`          | `oslabs.fs_ops`           | write vs fsync, file copy bandwidth                |
| `oslabs-crash-recovery`  | `oslabs.crash_recovery`   | atomic file replacement, directory fsync           |

Run any of them straight from the shell, for example:

```
oslabs-processes
oslabs-lockfree
oslabs-crash-recovery
```

Most labs take no options. A few do:

- `oslabs-finegrained --threads N --items N` sets how many threads run and how
  many increments each makes. The defaults are 4 threads and 1,000,000 items.
- `oslabs-fs-ops --directory DIR` and `oslabs-crash-recovery --directory DIR`
  choose where the scratch files are written. The default is the system's
  temporary directory, and the files are removed afterwards.

## Using the building blocks

The pieces each lab is built from can also be used on their own:

```python
from oslabs.lockfree import concurrent_push
from oslabs.crash_recovery import atomic_write

stack = concurrent_push(4, 1000)    # four threads, 1000 pushes each
print(len(stack))                   # 4000

atomic_write("settings.dat", b"new contents\n")
```

- `oslabs.common` holds the shared helpers. `print_section` prints section
  headings and `now_ns` gives a monotonic clock in nanoseconds. `read_lines`,
  `filter_prefixed` and `filter_containing` filter `/proc`-style text.
- `oslabs.processes`: `fork_and_reap(count)` returns `(pid, exit code)` pairs in
  the order the children were reaped. `reap_zombie()` creates a short-lived
  zombie, reaps it and returns its PID. `status_fields(lines)` picks the PID,
  memory and thread lines out of a status listing.
- `oslabs.context_switch`: `process_pingpong`, `thread_pingpong` and
  `getpid_latency` return elapsed nanoseconds. `context_switch_lines` picks the
  switch counters out of a status listing.
- `oslabs.concurrency`: `AtomicCounter` has `add()`, which returns the previous
  value, and `load()`. `racy_increment` and `atomic_increment` return final
  counts. `publish_acquire_release` hands a value from one thread to another
  behind a flag.
- `oslabs.finegrained`: `coarse_counts` and `fine_counts` return per-bucket
  totals. `cache_lines` counts the cache lines spanned by packed locks.
- `oslabs.mpmc`: `SemaphoreQueue` is a bounded FIFO built from two semaphores
  and a mutex. `run_mpmc` returns the put/get events in the order they happened,
  and `ring_entries` computes the fill level of a power-of-two ring.
- `oslabs.lockfree`: `LockFreeStack` has `push`, and `pop`, which raises
  `IndexError` when the stack is empty, and supports `len()`. `TaggedPointer`
  pairs a 48-bit address with a version tag, and `bump()` returns the next one.
- `oslabs.sync_primitives`: `Futex` provides `load`, `store`, `wait` and `wake`.
  `wait` raises `BlockingIOError` (EAGAIN) when the value no longer matches, and
  returns `False` when its timeout runs out.
- `oslabs.signals_demand`: `send_self_signal(signum)` must be called from the
  main thread. `minor_faults_for_touch(pages)` returns the faults counted for
  mapping the pages and for touching them. `signal_flags()` returns the
  `sigaction` flag values.
- `oslabs.fs_ops`: `write_and_fsync` returns the seconds spent writing and the
  seconds spent in fsync. `copy_bandwidth` returns the copy time, the bandwidth
  in MiB/s and the number of bytes copied.
- `oslabs.crash_recovery`: `atomic_write(path, data)` replaces a file via a
  temporary file, fsync, rename and a directory fsync. `fsync_directory(path)`
  does the directory fsync on its own.

## What is not included

The package has no lab that benchmarks a mutex against a spinlock, and no
spinlock class. It has no read-write lock, seqlock, trylock or recursive-lock
demonstration. It has no bounded buffer built on condition variables. The only
bounded queue is `oslabs.mpmc.SemaphoreQueue`.

## Note on the numbers

The timings depend on the machine, the kernel and the interpreter's own thread
scheduling. Read them as orders of magnitude and as comparisons within one run,
not as benchmarks.