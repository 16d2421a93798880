#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Restaurant Insights Pipeline

Runs the complete pipeline over the configured restaurant export, generating
a sample export first when none is present.
"""

import sys
import logging
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from src.restaurant_insights import RestaurantPipeline
from src.utils import Config, setup_logging, SampleDataGenerator, PipelineError

def main():
    """Main execution function."""
    # Initialize configuration
    try:
        config = Config()
        config.ensure_valid()
    except PipelineError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    # Setup logging
    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir="logs",
        row_details=config.LOG_LEVEL.upper() == 'DEBUG'
    )

    logger = logging.getLogger(__name__)
    logger.info("="*60)
    logger.info("RESTAURANT INSIGHTS PIPELINE - MAIN EXECUTION")
    logger.info("="*60)

    try:
        # Ensure directories exist
        config.ensure_directories()

        # Step 1: Generate sample data if no export is present
        input_file = config.DEFAULT_INPUT_FILE
        lookup_file = config.COUNTRY_LOOKUP_FILE
        generation_stats = None

        generator = SampleDataGenerator(seed=42)  # Reproducible data
        if not Path(input_file).exists():
            logger.info("Step 1: Generating sample data...")
            generation_stats = generator.generate_dataset(
                file_path=input_file,
                num_rows=config.DEFAULT_SAMPLE_ROWS,
                error_rate=0.1
            )
            logger.info(f"Sample data generated: {generation_stats}")
        else:
            logger.info(f"Step 1: Using existing export {input_file}")

        if not Path(lookup_file).exists():
            generator.write_country_lookup(lookup_file)

        # Step 2: Configure and run the pipeline
        logger.info("Step 2: Running restaurant pipeline...")

        pipeline = RestaurantPipeline(
            input_file=input_file,
            country_lookup_file=lookup_file,
            output_dir=config.DEFAULT_OUTPUT_DIR,
            chunk_size=config.DEFAULT_CHUNK_SIZE,
            config=config
        )

        # Validate input before processing
        if not pipeline.validate_input():
            logger.error("Input validation failed. Exiting.")
            return 1

        results = pipeline.run()

        # Step 3: Print summary
        logger.info("Step 3: Pipeline execution summary")
        _print_execution_summary(results, generation_stats)

        logger.info("Pipeline execution completed successfully!")
        return 0

    except PipelineError as e:
        logger.error(f"Pipeline aborted: {e}")
        return 2
    except Exception as e:
        logger.error(f"Pipeline execution failed: {e}", exc_info=True)
        return 1

def _print_execution_summary(results: dict, generation_stats: dict = None) -> None:
    """Print final execution summary."""
    print("\n" + "="*70)
    print("PIPELINE EXECUTION SUMMARY")
    print("="*70)

    if generation_stats:
        print("📊 Sample Data Generation:")
        print(f"   • Records generated: {generation_stats['total_rows']:,}")
        print(f"   • Error rate injected: {generation_stats['error_rate']:.1%}")
        print(f"   • Defect types: {len(generation_stats['error_types'])}")

    processing_stats = results['processing_stats']
    quality_stats = results['data_quality_stats']
    run_summary = results['run_summary']

    print("\n🔄 Data Processing:")
    print(f"   • Records processed: {processing_stats['records_processed']:,}")
    print(f"   • Data quality rate: {quality_stats['success_rate']:.1f}%")
    print(f"   • Dropped records: {quality_stats['records_dropped']:,}")
    print(f"   • Country lookup misses: {run_summary['enrichment']['lookup_misses']:,}")
    print(f"   • Restaurants analyzed: {processing_stats['restaurants_analyzed']:,}")
    print(f"   • Focus country: {run_summary['focus_country']}")

    print("\n📁 Generated Outputs:")
    for view_name, view_summary in run_summary['views'].items():
        print(f"   • {view_name.replace('_', ' ').title()}: {view_summary['rows']:,} rows")
    print(f"   • Output directory: {results['output_directory']}")

    print("="*70)

if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
