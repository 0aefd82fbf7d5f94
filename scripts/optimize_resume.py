# scripts/optimize_resume.py
#!/usr/bin/env python3
"""
Optimize a resume until every parameter clears the threshold

Usage:
    python scripts/optimize_resume.py --resume resume.json --jd job.txt --output optimized.json
    python scripts/optimize_resume.py --resume resume.json --jd job.txt --text optimized.txt --max-iterations 5
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from resume_optimizer.ats.jd_extractor import JDExtractor
from resume_optimizer.optimizer.convergence import ConvergenceOptimizer
from scripts.score_resume import load_resume, load_config


def print_summary(result):
    print("\n" + "=" * 70)
    print(f"{'OPTIMIZATION RESULT':^70}")
    print("=" * 70)
    print(f"Before:      {result.overall_before:.1f}/100")
    print(f"After:       {result.overall_after:.1f}/100")
    print(f"Improvement: {result.improvement:+.1f}")
    print(f"Iterations:  {result.iterations}")
    print(f"Changes:     {len(result.changes_applied)}")
    print(f"Time:        {result.processing_time:.2f}s")
    print()

    for change in result.changes_applied[:15]:
        print(f"  • [{change.parameter}] {change.description}")
    if len(result.changes_applied) > 15:
        print(f"  ... and {len(result.changes_applied) - 15} more")
    print()

    for warning in result.warnings:
        print(f"⚠ {warning}")


def main():
    parser = argparse.ArgumentParser(description='Optimize a resume for a job description')
    parser.add_argument('--resume', required=True, help='Resume file (.json or plain text)')
    parser.add_argument('--jd', required=True, help='Job description text file')
    parser.add_argument('--role', help='Target role')
    parser.add_argument('--config', help='Engine config YAML file')
    parser.add_argument('--max-iterations', type=int, help='Override the iteration cap')
    parser.add_argument('--output', help='Write the full result as JSON')
    parser.add_argument('--text', help='Write the optimized resume as plain text')
    parser.add_argument('--verbose', action='store_true', help='Show optimizer progress')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s'
    )

    config = load_config(args.config)
    if args.max_iterations:
        config = dataclasses.replace(config, max_iterations=args.max_iterations)

    try:
        resume = load_resume(args.resume)
        jd_text = Path(args.jd).read_text(encoding='utf-8')
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load input: {e}")
        return 1

    profile = JDExtractor(config).extract(jd_text, args.role)
    result = ConvergenceOptimizer(config).optimize(resume, profile, target_role=args.role)

    print_summary(result)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"✓ Result saved to: {output_path}")

    if args.text:
        Path(args.text).write_text(result.rewritten_resume.to_text(), encoding='utf-8')
        print(f"✓ Resume text saved to: {args.text}")

    return 0 if result.converged else 2


if __name__ == '__main__':
    sys.exit(main())
