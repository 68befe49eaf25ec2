import zipfile
import numpy as np
import pandas as pd
import streamlit as st

from dcthash.config import DEFAULT_BIT_RESOLUTION
from dcthash.data.loader import decode_image, load_from_zip
from dcthash.errors import ImageInputError
from dcthash.hashing.perceptive import PerceptiveHash
from dcthash.models.neighbors import cluster_duplicates
from dcthash.utils.eval import pairwise_distances
from dcthash.utils.plotting import plot_distance_histogram

st.set_page_config(page_title="Perceptual Hash — Near Duplicates", layout="wide")
st.title("Perceptual Hash — Near Duplicates")
st.caption("Runs locally during this session. No data is stored.")
st.markdown("---")

def ok(m): st.success(f"✅ {m}")
def warn(m): st.warning(f"⚠️ {m}")
def err(m): st.error(f"❌ {m}")

ss = st.session_state
for k, v in dict(images=None, names=None, hashes=None, bits=None).items():
    if k not in ss: ss[k] = v

# Step 1 — Load
st.markdown("### Step 1 · Load images")
ups = st.file_uploader("Upload images or one ZIP", accept_multiple_files=True,
                       type=["zip","png","jpg","jpeg","bmp","gif","webp","tif","tiff","dcm"])

if st.button("Load", type="primary", disabled=not ups):
    images, names, skipped = [], [], 0
    for up in ups:
        raw = up.getvalue()
        if up.name.lower().endswith(".zip"):
            try:
                imgs, ns, report = load_from_zip(raw)
            except (ImageInputError, zipfile.BadZipFile) as e:
                err(f"{up.name}: {e}")
                continue
            images += imgs; names += [f"{up.name}/{n}" for n in ns]
            skipped += report["skipped"]
        else:
            try:
                images.append(decode_image(up.name, raw)); names.append(up.name)
            except ImageInputError:
                skipped += 1
    ss.images, ss.names, ss.hashes = images, names, None
    ok(f"Loaded {len(images)} images")
    if skipped:
        warn(f"Skipped {skipped} files (unsupported/corrupt).")
    if images:
        cols = st.columns(min(6, len(images)))
        for i in range(min(6, len(images))):
            cols[i].image(images[i], caption=names[i], use_container_width=True)

st.markdown("---")

# Step 2 — Hash
st.markdown("### Step 2 · Hash")
bits = st.slider("Bit resolution", 4, 1024, DEFAULT_BIT_RESOLUTION, step=4,
                 help="Approximate hash length. Higher tracks finer detail.")
if st.button("Compute hashes", type="primary", disabled=not ss.images):
    with PerceptiveHash(bits) as hasher:
        ss.hashes = [hasher.hash(img) for img in ss.images]
        ss.bits = hasher.config.hash_length
        ok(f"{len(ss.hashes)} hashes · {hasher.config.width}x{hasher.config.height} grid · {ss.bits} bits")

if ss.hashes:
    st.dataframe(pd.DataFrame({"image": ss.names, "hash": [h.hex for h in ss.hashes]}),
                 use_container_width=True)

st.markdown("---")

# Step 3 — Compare
st.markdown("### Step 3 · Near duplicates")
max_d = st.slider("Max normalized Hamming distance", 0.0, 0.5, 0.15, step=0.01)
if ss.hashes and len(ss.hashes) >= 2:
    d = pairwise_distances(ss.hashes)
    st.dataframe(pd.DataFrame(d, index=ss.names, columns=ss.names).round(3), use_container_width=True)
    iu = np.triu_indices(len(ss.hashes), k=1)
    st.pyplot(plot_distance_histogram(d[iu], threshold=max_d))
    clusters = cluster_duplicates(ss.hashes, max_d)
    if not clusters:
        st.write("No near duplicates at this distance.")
    for k, group in enumerate(clusters):
        st.write(f"**Group {k + 1}**")
        cols = st.columns(min(6, len(group)))
        for c, i in zip(cols, group[:6]):
            c.image(ss.images[i], caption=ss.names[i], use_container_width=True)
elif ss.hashes:
    warn("Load at least two images to compare.")
