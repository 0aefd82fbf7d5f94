# scripts/score_resume.py
#!/usr/bin/env python3
"""
Score a resume against a job description on 16 parameters

Usage:
    python scripts/score_resume.py --resume resume.json --jd job.txt
    python scripts/score_resume.py --resume resume.txt --jd job.txt --role "DevOps Engineer" --output report.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from resume_optimizer.config import EngineConfig, get_config
from resume_optimizer.normalizer import normalize_resume, normalize_resume_text
from resume_optimizer.ats.jd_extractor import JDExtractor
from resume_optimizer.ats.scorer import ResumeScorer

logger = logging.getLogger(__name__)


def load_resume(path):
    """Load a resume from JSON (structured) or plain text"""
    file_path = Path(path)
    content = file_path.read_text(encoding='utf-8')
    if file_path.suffix.lower() == '.json':
        return normalize_resume(json.loads(content))

    result = normalize_resume_text(content)
    for warning in result.warnings:
        print(f"⚠ {warning}")
    return result.resume


def load_config(path):
    if path:
        return EngineConfig.from_yaml(path)
    return get_config()


def print_report(report, profile, threshold):
    print("\n" + "=" * 70)
    print(f"{'RESUME SCORE':^70}")
    print("=" * 70)
    print(f"Role: {profile.role_title} ({profile.seniority.value})")
    print(f"Keywords: {', '.join(k.display for k in profile.keywords[:10])}")
    print()
    print(f"{'#':<4} {'Parameter':<28} {'Score':<14} {'%':<8}")
    print("-" * 70)
    for p in report.parameters:
        mark = '✓' if p.passes(threshold) else '✗'
        print(f"{p.id:<4} {p.label:<28} {p.score:5.1f}/{p.max_score:<7.0f} {p.percentage:5.1f}%  {mark}")
    print("-" * 70)
    print(f"Overall: {report.overall:.1f}/100 (Grade {report.grade})")
    print()

    failing = report.failing(threshold)
    if failing:
        print("Recommendations:")
        for p in failing:
            for rec in p.recommendations[:2]:
                print(f"  • {rec}")
        print()


def main():
    parser = argparse.ArgumentParser(description='Score a resume against a job description')
    parser.add_argument('--resume', required=True, help='Resume file (.json or plain text)')
    parser.add_argument('--jd', required=True, help='Job description text file')
    parser.add_argument('--role', help='Target role (overrides the title found in the JD)')
    parser.add_argument('--config', help='Engine config YAML file')
    parser.add_argument('--output', help='Write the score report as JSON')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s'
    )

    config = load_config(args.config)

    try:
        resume = load_resume(args.resume)
        jd_text = Path(args.jd).read_text(encoding='utf-8')
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load input: {e}")
        return 1

    profile = JDExtractor(config).extract(jd_text, args.role)
    report = ResumeScorer(config).score(resume, profile)

    print_report(report, profile, config.pass_threshold)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump({'profile': profile.to_dict(), 'report': report.to_dict()}, f, indent=2, ensure_ascii=False)
        print(f"✓ Report saved to: {output_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
