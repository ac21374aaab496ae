"""ID3 tag handler using mutagen for cross-format support."""

from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.mp3 import MP3
from mutagen.flac import FLAC
from mutagen.mp4 import MP4
from mutagen.id3 import TIT2, TPE1, TALB, TRCK

from media_normalizer.errors import NoPrimaryTagError, TagReadError, TagWriteError
from media_normalizer.models import TrackMetadata, TrackTags


class ID3Handler:
    """Handles reading and writing tags using mutagen."""

    # MP4/M4A tag mapping (different from ID3)
    MP4_TAGS = {
        "title": "\xa9nam",
        "artist": "\xa9ART",
        "album": "\xa9alb",
        "track": "trkn",  # tuple: (track_num, total)
        "comment": "\xa9cmt",
    }

    # Vorbis comment keys that hold free-form comments
    FLAC_COMMENT_KEYS = ("comment", "description")

    LOADERS = {".mp3": MP3, ".flac": FLAC, ".m4a": MP4}

    def _load(self, file_path: str):
        """Open the file with the mutagen class for its extension."""
        ext = Path(file_path).suffix.lower()
        loader = self.LOADERS.get(ext)
        if loader is None:
            raise NoPrimaryTagError(file_path, f"no tag container for '{ext}' files")
        try:
            return loader(file_path)
        except MutagenError as e:
            raise TagReadError(file_path, str(e)) from e

    def read_tags(self, file_path: str) -> TrackMetadata:
        """
        Read existing tags from audio file.

        Args:
            file_path: Path to audio file

        Returns:
            TrackMetadata with current tags

        Raises:
            TagReadError: If mutagen cannot parse the file
            NoPrimaryTagError: If the format has no supported tag container
        """
        file_path = str(file_path)
        audio = self._load(file_path)
        tags = audio.tags or {}
        ext = Path(file_path).suffix.lower()

        if ext == ".mp3":
            return self._read_mp3_tags(tags)
        elif ext == ".flac":
            return self._read_flac_tags(tags)
        return self._read_m4a_tags(tags)

    def _read_mp3_tags(self, tags) -> TrackMetadata:
        """Read ID3v2 frames."""
        track_num = self._parse_track(
            str(tags.get("TRCK", [""])[0]) if tags.get("TRCK") else ""
        )
        comments = tags.getall("COMM") if hasattr(tags, "getall") else []

        return TrackMetadata(
            title=self._get_tag_str(tags, "TIT2"),
            artist=self._get_tag_str(tags, "TPE1"),
            album=self._get_tag_str(tags, "TALB"),
            track_number=track_num,
            comment=str(comments[0]) if comments else None,
        )

    def _read_flac_tags(self, tags) -> TrackMetadata:
        """Read Vorbis comments."""
        comment = None
        for key in self.FLAC_COMMENT_KEYS:
            if tags.get(key):
                comment = tags.get(key)[0]
                break

        return TrackMetadata(
            title=tags.get("title", [None])[0],
            artist=tags.get("artist", [None])[0],
            album=tags.get("album", [None])[0],
            track_number=self._parse_track(tags.get("tracknumber", [""])[0]),
            comment=comment,
        )

    def _read_m4a_tags(self, tags) -> TrackMetadata:
        """Read MP4 atoms."""
        track_info = tags.get(self.MP4_TAGS["track"], [(None, None)])[0]
        track_num = track_info[0] if track_info and track_info[0] else None

        return TrackMetadata(
            title=self._get_mp4_tag(tags, "title"),
            artist=self._get_mp4_tag(tags, "artist"),
            album=self._get_mp4_tag(tags, "album"),
            track_number=track_num,
            comment=self._get_mp4_tag(tags, "comment"),
        )

    def write_tags(self, file_path: str, tags: TrackTags) -> None:
        """
        Write tags to audio file and drop any comment.

        Fields set to None are left as they are.

        Args:
            file_path: Path to audio file
            tags: Values to write

        Raises:
            TagReadError: If the file cannot be opened for writing
            TagWriteError: If mutagen fails to update or save the file
        """
        file_path = str(file_path)
        audio = self._load(file_path)
        ext = Path(file_path).suffix.lower()

        try:
            if audio.tags is None:
                audio.add_tags()

            if ext == ".mp3":
                self._apply_mp3_tags(audio, tags)
            elif ext == ".flac":
                self._apply_flac_tags(audio, tags)
            else:
                self._apply_m4a_tags(audio, tags)

            audio.save()
        except (MutagenError, ValueError) as e:
            raise TagWriteError(file_path, str(e)) from e

    def _apply_mp3_tags(self, audio, tags: TrackTags) -> None:
        """Set ID3v2 frames."""
        if tags.title is not None:
            audio.tags.add(TIT2(encoding=3, text=tags.title))
        if tags.artist is not None:
            audio.tags.add(TPE1(encoding=3, text=tags.artist))
        if tags.album is not None:
            audio.tags.add(TALB(encoding=3, text=tags.album))
        if tags.track_number is not None:
            audio.tags.add(TRCK(encoding=3, text=str(tags.track_number)))
        audio.tags.delall("COMM")

    def _apply_flac_tags(self, audio, tags: TrackTags) -> None:
        """Set Vorbis comments."""
        if tags.title is not None:
            audio["title"] = tags.title
        if tags.artist is not None:
            audio["artist"] = tags.artist
        if tags.album is not None:
            audio["album"] = tags.album
        if tags.track_number is not None:
            audio["tracknumber"] = str(tags.track_number)
        for key in self.FLAC_COMMENT_KEYS:
            if key in audio.tags:
                del audio.tags[key]

    def _apply_m4a_tags(self, audio, tags: TrackTags) -> None:
        """Set MP4 atoms."""
        if tags.title is not None:
            audio.tags[self.MP4_TAGS["title"]] = [tags.title]
        if tags.artist is not None:
            audio.tags[self.MP4_TAGS["artist"]] = [tags.artist]
        if tags.album is not None:
            audio.tags[self.MP4_TAGS["album"]] = [tags.album]
        if tags.track_number is not None:
            audio.tags[self.MP4_TAGS["track"]] = [(tags.track_number, 0)]
        if self.MP4_TAGS["comment"] in audio.tags:
            del audio.tags[self.MP4_TAGS["comment"]]

    def _get_tag_str(self, tags, key: str) -> Optional[str]:
        """Get string value from ID3 tag."""
        tag = tags.get(key)
        if tag:
            value = str(tag[0]) if hasattr(tag, "__getitem__") else str(tag)
            return value if value else None
        return None

    def _get_mp4_tag(self, tags, key: str) -> Optional[str]:
        """Get string value from MP4 tag."""
        mp4_key = self.MP4_TAGS.get(key)
        if mp4_key and mp4_key in tags:
            value = tags[mp4_key]
            if isinstance(value, list) and value:
                return str(value[0]) if value[0] else None
            return str(value) if value else None
        return None

    def _parse_track(self, value: str) -> Optional[int]:
        """Parse a track string like '3/12' or '3' into the track number."""
        if not value:
            return None
        try:
            head = str(value).split("/")[0].strip()
            return int(head) if head else None
        except ValueError:
            return None
