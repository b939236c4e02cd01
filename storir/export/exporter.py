import zipfile
import io
import json
from datetime import datetime

from storir.core.io import AudioIO
from storir.generator import ImpulseResponseEngine
from storir.params.resolve import resolve_params, spec_from_params
from storir.params.clamp import clamp_params


def batch_filename(params: dict, index: int) -> str:
    """Deterministic WAV name from the spec params and a 1-based index."""
    return (
        f"rir_rt{params['rt60_ms']:g}_edt{params['edt_ms']:g}_itdg{params['itdg_ms']:g}"
        f"_er{params['er_duration_ms']:g}_drr{params['drr_db']:g}_{index}.wav"
    )


class Exporter:
    @staticmethod
    def create_batch_zip(batch_data: dict) -> bytes:
        """
        batch_data: {
          'name': 'HallSet',
          'params': { 'rt60_ms': 800, 'edt_ms': 60, ... },
          'count': 5,
          'seed': 123,
          'mode': 'default' | 'realistic'
        }
        Response i (1-based) is rendered with seed + i - 1.
        Raises ConfigurationError before anything is rendered if the params are invalid.
        """
        resolved = resolve_params(batch_data.get('params') or {})
        if batch_data.get('mode') == 'realistic':
            resolved = clamp_params(resolved)
        spec = spec_from_params(resolved)
        sample_rate = resolved['sample_rate']
        count = max(1, int(batch_data.get('count', 1)))
        seed = int(batch_data.get('seed', 0))

        engine = ImpulseResponseEngine(sample_rate)
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zip_file:
            files = []
            for index in range(1, count + 1):
                item_seed = seed + index - 1
                audio = engine.render(spec, seed=item_seed)
                name = batch_filename(resolved, index)
                zip_file.writestr(name, AudioIO.to_bytes(audio, sample_rate))
                files.append({"file": name, "seed": item_seed, "length_samples": int(audio.shape[-1])})

            meta = {
                "batch_name": batch_data.get('name', 'StoRIR'),
                "created_at": datetime.now().isoformat(),
                "resolved_params": resolved,
                "files": files,
            }
            zip_file.writestr("batch_info.json", json.dumps(meta, indent=2))

        return buffer.getvalue()
