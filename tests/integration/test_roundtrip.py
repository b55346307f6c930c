"""Integration tests — assemble a bag on disk, then open and validate it.

Exercises the full stack end to end: checksum engine, payload copy,
manifest/tag file writing, and the validation state machine.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from pathlib import Path

import pytest

from bagforge import api
from bagforge.core.bag import Bag, PayloadNameError
from bagforge.core.hasher import register_hasher
from bagforge.errors import ErrorKind
from bagforge.models.algorithm import Algorithm
from bagforge.models.tags import BaggingDate, CustomTag, PayloadOxum


class TestAssembleThenValidate:
    def test_two_file_bag(self, sha256_bag: Bag):
        root = sha256_bag.root

        declaration = (root / "bagit.txt").read_text().split("\n")
        assert declaration == ["BagIt-Version: 1.0", "Tag-File-Character-Encoding: UTF-8"]

        manifest = (root / "manifest-sha256.txt").read_text().split("\n")
        assert len(manifest) == 2
        for line, name in zip(manifest, ("first.bin", "second.bin")):
            assert re.fullmatch(rf"[0-9a-f]{{64}} data/{name}", line)

        assert (root / "bag-info.txt").read_text() == "Payload-Oxum: 300.2"

        tag_manifest = (root / "tagmanifest-sha256.txt").read_text().split("\n")
        assert [line.split(" ", 1)[1] for line in tag_manifest] == [
            "bagit.txt",
            "bag-info.txt",
            "manifest-sha256.txt",
        ]

        opened = Bag.read_existing(root, "sha256")
        assert [p.relative_path.as_posix() for p in opened.payloads()] == [
            "data/first.bin",
            "data/second.bin",
        ]
        assert opened == Bag.read_existing(root, "sha256")

    def test_checksums_match_hashlib(self, sha256_bag: Bag):
        for payload in sha256_bag.payloads():
            content = payload.absolute_path(sha256_bag.root).read_bytes()
            assert payload.checksum.value == hashlib.sha256(content).hexdigest()

    def test_tags_survive_round_trip(self, bag_root: Path, make_source_file: Callable[..., Path]):
        bag = Bag.new_empty(bag_root, "sha512")
        bag.add_tag(CustomTag.of("Source-Organization", "Example Archive"))
        bag.add_tag(BaggingDate.model_validate({"date": "2024-03-01"}))
        bag.add_file(make_source_file("doc.txt", b"hello"))
        bag.finalize()

        opened = Bag.read_existing(bag_root, "sha512")
        assert opened.tags == (
            CustomTag.of("Source-Organization", "Example Archive"),
            BaggingDate.model_validate({"date": "2024-03-01"}),
            PayloadOxum(octet_count=5, stream_count=1),
        )

    def test_rebuild_is_byte_identical(
        self, tmp_dir: Path, make_source_file: Callable[..., Path]
    ):
        sources = [make_source_file("x.bin", size=64), make_source_file("y.bin", size=3)]
        roots = [tmp_dir / "one", tmp_dir / "two"]
        for root in roots:
            bag = api.create_empty(root, "blake2b256")
            for source in sources:
                api.add_file(bag, source)
            api.finalize(bag)

        for name in ("bagit.txt", "bag-info.txt", "manifest-blake2b256.txt", "tagmanifest-blake2b256.txt"):
            assert (roots[0] / name).read_bytes() == (roots[1] / name).read_bytes()

    def test_payload_with_space_in_name_rejected(
        self, bag_root: Path, make_source_file: Callable[..., Path]
    ):
        bag = api.create_empty(bag_root)
        with pytest.raises(PayloadNameError) as info:
            api.add_file(bag, make_source_file("annual report.pdf", size=10))
        assert info.value.kind is ErrorKind.INPUT
        assert len(bag) == 0
        assert not (bag_root / "data").exists()


class TestAlgorithms:
    @pytest.mark.parametrize(
        "algorithm, hex_length",
        [
            (Algorithm.sha256(), 64),
            (Algorithm.sha512(), 128),
            (Algorithm.blake2b256(), 64),
            (Algorithm.blake2b512(), 128),
            (Algorithm.custom("md5"), 32),
            (Algorithm.custom("sha3_256"), 64),
        ],
    )
    def test_round_trip(self, make_bag: Callable[..., Bag], algorithm: Algorithm, hex_length: int):
        bag = make_bag(algorithm=algorithm)
        assert (bag.root / algorithm.manifest_filename).is_file()
        opened = Bag.read_existing(bag.root, algorithm)
        assert opened == bag
        assert all(len(p.checksum.value) == hex_length for p in opened.payloads())

    def test_registered_custom_algorithm(self, make_bag: Callable[..., Bag]):
        register_hasher("sha1-legacy", hashlib.sha1)
        bag = make_bag(algorithm="sha1-legacy")
        assert (bag.root / "manifest-sha1-legacy.txt").is_file()
        opened = Bag.read_existing(bag.root, "sha1-legacy")
        assert all(len(p.checksum.value) == 40 for p in opened.payloads())
