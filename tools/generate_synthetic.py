"""Generate a synthetic image folder for pixel similarity experiments.

Creates `synth_images/` under the output directory with, per base image:
an exact copy, a copy with a small brightness offset, a copy with sparse
noise, a copy at a different size, plus one non-image file. A labels CSV
`synth_labels.csv` lists the expected similarity of each copy against its
base at the given pixel precision.

Usage:
  python tools/generate_synthetic.py --out_dir ./data --count 3
  python image_similarity_cli.py ./data/synth_images 0.9 -p 3
"""
import argparse
import csv
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw


def _base_image(i: int) -> Image.Image:
    img = Image.new('RGB', (120, 90), (120 + i * 20, 90 + i * 15, 60 + i * 10))
    draw = ImageDraw.Draw(img)
    for x in range(10, 110, 6):
        for y in range(10, 80, 6):
            if (x * y + i) % 13 < 4:
                draw.point((x, y), (0, 0, 0))
    return img


def generate(out_dir: Path, count: int = 3, seed: int = 0):
    rng = np.random.default_rng(seed)
    images = out_dir / 'synth_images'
    images.mkdir(parents=True, exist_ok=True)

    labels = []
    for i in range(1, count + 1):
        img = _base_image(i)
        base = images / f'base_{i}.png'
        img.save(base)
        arr = np.asarray(img).astype(np.int16)

        # exact copy
        img.save(images / f'base_{i}_copy.png')
        labels.append((f'base_{i}_copy.png', base.name, 0, 1.0))

        # brightness offset of 2 on every element
        bright = np.clip(arr + 2, 0, 255).astype(np.uint8)
        Image.fromarray(bright).save(images / f'base_{i}_bright.png')
        within = float(np.mean(np.abs(bright.astype(np.int16) - arr) <= 2))
        labels.append((f'base_{i}_bright.png', base.name, 2, within))

        # sparse noise on ~5% of elements
        noisy = arr.copy()
        mask = rng.random(noisy.shape) < 0.05
        noisy[mask] = rng.integers(0, 256, size=int(mask.sum()))
        noisy = noisy.astype(np.uint8)
        Image.fromarray(noisy).save(images / f'base_{i}_noise.png')
        same = float(np.mean(noisy.astype(np.int16) == arr))
        labels.append((f'base_{i}_noise.png', base.name, 0, same))

        # different size, only comparable with -r
        img.resize((60, 45)).save(images / f'base_{i}_small.png')
        labels.append((f'base_{i}_small.png', base.name, '', ''))

    (images / 'notes.txt').write_text('not an image\n', encoding='utf-8')

    labp = out_dir / 'synth_labels.csv'
    with open(labp, 'w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(['image', 'base_image', 'precision', 'expected_similarity'])
        for name, base_name, prec, sim in labels:
            w.writerow([name, base_name, prec, sim])

    print('Synthetic dataset created:')
    print(' IMAGES:', images)
    print(' Labels:', labp)


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--out_dir', default='./data')
    parser.add_argument('--count', type=int, default=3)
    parser.add_argument('--seed', type=int, default=0)
    args = parser.parse_args()
    generate(Path(args.out_dir), count=args.count, seed=args.seed)
