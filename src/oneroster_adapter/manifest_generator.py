"""
ManifestGenerator module for extraction run summaries
"""
from datetime import datetime, timezone
from typing import Dict, Any


class ManifestGenerator:
    """Summarises per-endpoint fetch results of a dataset pull"""

    def generate_manifest_data(self, processing_results: Dict[str, Any]) -> Dict[str, Any]:
        """
        Generate complete manifest with summary statistics

        Args:
            processing_results: Dictionary with structure:
                {
                    'run_id': str,
                    'data_source': str,
                    'endpoints': List[Dict] with keys: endpoint, status, status_code,
                                 pages_processed, records_retrieved, total_results,
                                 error, start_time, end_time
                    'start_time': datetime,
                    'end_time': datetime
                }

        Returns:
            Dict containing complete manifest data
        """
        endpoints = processing_results.get('endpoints', [])
        start_time = processing_results.get('start_time')
        end_time = processing_results.get('end_time')

        return {
            'run_id': processing_results.get('run_id', ''),
            'data_source': processing_results.get('data_source', ''),
            'generated_timestamp': datetime.now(timezone.utc).isoformat(),
            'processing_summary': self.calculate_summary_statistics(processing_results),
            'endpoint_details': [self._format_endpoint_details(e) for e in endpoints],
            'metadata': {
                'manifest_version': '1.0',
                'generator': 'DatasetOrchestrator',
                'processing_start': start_time.isoformat() if start_time else None,
                'processing_end': end_time.isoformat() if end_time else None
            }
        }

    def calculate_summary_statistics(self, results: Dict[str, Any]) -> Dict[str, Any]:
        """
        Calculate summary statistics from processing results

        Args:
            results: Processing results dictionary

        Returns:
            Dictionary containing calculated statistics
        """
        endpoints = results.get('endpoints', [])
        total_endpoints = len(endpoints)

        completed = [e for e in endpoints if e.get('status') == 'completed']
        failed = [e for e in endpoints if e.get('status') == 'failed']
        partial = [e for e in endpoints if e.get('status') == 'partial']

        success_rate = (len(completed) / total_endpoints * 100) if total_endpoints > 0 else 0.0

        return {
            'total_endpoints': total_endpoints,
            'completed_endpoints': len(completed),
            'failed_endpoints': len(failed),
            'partial_endpoints': len(partial),
            'success_rate_percent': round(success_rate, 2),
            'total_pages': sum(e.get('pages_processed', 0) for e in endpoints),
            'total_records_retrieved': sum(e.get('records_retrieved', 0) for e in endpoints),
            'incomplete_endpoints': [e.get('endpoint') for e in endpoints if e.get('status') != 'completed'],
            'processing_duration_seconds': self._calculate_duration(results)
        }

    def _format_endpoint_details(self, endpoint: Dict[str, Any]) -> Dict[str, Any]:
        """Format one endpoint's result for manifest output"""
        details = {
            'endpoint': endpoint.get('endpoint', ''),
            'status': endpoint.get('status', 'unknown'),
            'complete': endpoint.get('complete', endpoint.get('status') == 'completed'),
            'status_code': endpoint.get('status_code'),
            'pages_processed': endpoint.get('pages_processed', 0),
            'records_retrieved': endpoint.get('records_retrieved', 0),
            'total_results': endpoint.get('total_results'),
            'processing_time_seconds': self._calculate_duration(endpoint)
        }
        if endpoint.get('error'):
            details['error'] = endpoint['error']
        return details

    def _calculate_duration(self, item: Dict[str, Any]) -> float:
        """Seconds between start_time and end_time, 0.0 if either is missing"""
        start_time = item.get('start_time')
        end_time = item.get('end_time')

        if start_time and end_time:
            return round((end_time - start_time).total_seconds(), 2)

        return 0.0
