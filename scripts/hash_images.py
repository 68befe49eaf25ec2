# hash a folder or ZIP of images and list near-duplicate groups
import argparse
from pathlib import Path
from dcthash.config import DEFAULT_BIT_RESOLUTION
from dcthash.data.loader import load_from_dir, load_from_zip
from dcthash.hashing.perceptive import PerceptiveHash
from dcthash.logging import configure_logging
from dcthash.models.neighbors import cluster_duplicates

def main():
    ap = argparse.ArgumentParser(description="Compute DCT perceptual hashes and group near duplicates.")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--zip", help="ZIP archive of images")
    src.add_argument("--dir", help="Folder of images (recursive)")
    ap.add_argument("--bits", type=int, default=DEFAULT_BIT_RESOLUTION, help="Requested hash length")
    ap.add_argument("--max-distance", type=float, default=0.15,
                    help="Normalized Hamming distance for two images to count as duplicates")
    ap.add_argument("--limit", type=int, default=None)
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args()

    log = configure_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    if args.zip:
        with open(args.zip, "rb") as f:
            images, names, report = load_from_zip(f.read(), args.limit)
    else:
        images, names, report = load_from_dir(args.dir, args.limit)
    for n in report["skipped_names"]:
        log.warning("skipped unreadable file: %s", n)

    with PerceptiveHash(args.bits) as hasher:
        hashes = [hasher.hash(img) for img in images]

    for name, h in zip(names, hashes):
        print(f"{name}\t{h.hex}")

    clusters = cluster_duplicates(hashes, args.max_distance)
    log.info("%d images, %d duplicate groups", len(hashes), len(clusters))
    for k, group in enumerate(clusters):
        print(f"\n# group {k}")
        for i in group:
            print(names[i])

if __name__ == "__main__":
    main()
