from collections import OrderedDict

import geojson

def convert_to_geojson(records, properties=None):
    """Point features for records carrying latitude/longitude (bus positions, stops)."""
    features = []
    for record in records:
        point = geojson.Point((record.longitude, record.latitude))
        feature_properties = record.model_dump(include=set(properties)) if properties else {}
        features.append(geojson.Feature(geometry=point, properties=feature_properties))
    return geojson.FeatureCollection(features)

def shapes_to_geojson(shapes):
    """One LineString per shape_id, points ordered by shape_pt_sequence."""
    grouped = OrderedDict()
    for shape in shapes:
        grouped.setdefault(shape.shape_id, []).append(shape)
    features = []
    for shape_id, points in grouped.items():
        points = sorted(points, key=lambda point: point.sequence)
        line = geojson.LineString([(point.longitude, point.latitude) for point in points])
        features.append(geojson.Feature(geometry=line, properties={'shape_id': shape_id, 'point_count': len(points)}))
    return geojson.FeatureCollection(features)
