"""DynamoDB tablolarını kurar ve istenirse örnek veriyi yükler.

Kullanım:
    python -m data_layer.scripts.setup_tables                    # Tabloları kur
    python -m data_layer.scripts.setup_tables --seed data_layer/data/seed.json
    python -m data_layer.scripts.setup_tables --delete           # Her şeyi sil
"""
import argparse
import logging
import os
import sys

# Proje root'unu path'e ekle
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import env_loader  # noqa: F401
from data_layer.infrastructure.dynamodb_setup import create_tables, delete_tables, load_seed_file
from src.config import load_settings


def main(argv=None):
    parser = argparse.ArgumentParser(description="Envanter DynamoDB tablolarını yönetir")
    parser.add_argument("--delete", action="store_true", help="Tüm tabloları sil")
    parser.add_argument("--seed", help="Yüklenecek JSON seed dosyası")
    parser.add_argument("--region", help="AWS region (varsayılan: ayarlar)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    settings = load_settings()
    region = args.region or settings.region_name
    common = {"region": region, "prefix": settings.table_prefix, "endpoint_url": settings.endpoint_url}

    if args.delete:
        print("🗑️  Tablolar siliniyor...")
        delete_tables(**common)
        print("✅ Tüm tablolar silindi!")
        return

    print("=" * 60)
    print("🚀 DynamoDB Kurulumu - Envanter ve İkmal Yönetimi")
    print(f"   Region: {region}  Önek: {settings.table_prefix or '-'}")
    print("=" * 60)

    created = create_tables(**common)
    print(f"\n📊 {len(created)} tablo oluşturuldu")

    if args.seed:
        counts = load_seed_file(args.seed, **common)
        for table_name, count in counts.items():
            print(f"  ✓  {table_name}: {count} kayıt")

    print("\n✅ Veri katmanı hazır!")


if __name__ == "__main__":
    main()
