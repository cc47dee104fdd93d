#!/usr/bin/env python3
"""
Minipy Benchmark Suite - interpreter throughput on loop-heavy programs
"""

import io
import time

from minipy import evaluate, parse, tokenize

HUNDRED_THOUSAND = 100_000
TEN_THOUSAND = 10_000

def now_ms():
    return time.perf_counter() * 1000

def run(source: str):
    """Time each pipeline stage; output goes to an in-memory sink"""
    t0 = now_ms()
    tokens = tokenize(source)
    t1 = now_ms()
    statements = parse(tokens)
    t2 = now_ms()
    out = io.StringIO()
    env = {}
    evaluate(statements, env, out)
    t3 = now_ms()
    return (t1 - t0, t2 - t1, t3 - t2), env, out.getvalue()

def report(label: str, timings, detail: str):
    lex, par, ev = timings
    print(f"{label:<26} lex {lex:7.2f} ms  parse {par:7.2f} ms  eval {ev:9.2f} ms  ({detail})")

# 1. Print loop
def bench_print_loop():
    source = f"""
x = {HUNDRED_THOUSAND}
for i in range(0, x):
    print('x')
"""
    timings, env, out = run(source)
    report("1. Print loop (1e5):", timings, f"lines={out.count(chr(10))}")

# 2. Integer arithmetic
def bench_arith():
    source = f"""
x = 1
for i in range(0, {HUNDRED_THOUSAND}):
    x = x * 3 + 7 - x * 2
"""
    timings, env, out = run(source)
    report("2. Arithmetic (1e5):", timings, f"x={env['x']:.0f}")

# 3. While countdown
def bench_while():
    source = f"""
n = {HUNDRED_THOUSAND}
while n > 0:
    n = n - 1
"""
    timings, env, out = run(source)
    report("3. While countdown (1e5):", timings, f"n={env['n']:.0f}")

# 4. Branching
def bench_branching():
    source = f"""
hits = 0
for i in range(0, {HUNDRED_THOUSAND}):
    if i - i // 2 * 2:
        hits = hits + 1
"""
    timings, env, out = run(source)
    report("4. Branching (1e5):", timings, f"hits={env['hits']:.0f}")

# 5. Large source
def bench_large_source():
    source = "\n".join(f"v{i} = {i} * 2 + {i} ** 2 // 3" for i in range(TEN_THOUSAND))
    timings, env, out = run(source)
    report("5. Large source (1e4 lines):", timings, f"vars={len(env)}")

if __name__ == "__main__":
    print("=== Minipy Benchmark Suite ===\n")

    bench_print_loop()
    bench_arith()
    bench_while()
    bench_branching()
    bench_large_source()

    print("\n=== Done ===")
